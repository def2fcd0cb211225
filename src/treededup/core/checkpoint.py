"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/checkpoint.py
Snapshot persistence for resumable runs.

FORMAT
------
    <State GeneratedAt="..." Algorithm="md5">
      <Originals>
        <Folder Name="photos">
          <File Name="a.jpg">5D41402ABC4B2A76B9719D911017C592</File>
          <File Name="b.jpg" />
        </Folder>
      </Originals>
      <DuplicateCandidates />
    </State>

Folders with no file anywhere beneath them are left out. A file's text is its
content hash as uppercase hex, present only once the file has been hashed.
Names XML cannot carry verbatim are written as a NameB64 attribute holding the
base64 of the raw filesystem name instead of Name.
Full paths are not stored: they are rebuilt from the configured roots and the
folder nesting on load.

Older single-root snapshots keep their Folder/File elements directly under
<State>; those load as the originals tree.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
import base64
import binascii
import os
import re
import logging
import xml.etree.ElementTree as ET

from treededup.core.interfaces import HashAlgorithm
from treededup.core.hasher import MD5AlgorithmImpl
from treededup.core.models import DirectoryNode, FileNode, Origin
from treededup.core.path_tree import PathTree

logger = logging.getLogger(__name__)

STATE_ELEMENT = "State"
FOLDER_ELEMENT = "Folder"
FILE_ELEMENT = "File"
NAME_ATTRIBUTE = "Name"
ENCODED_NAME_ATTRIBUTE = "NameB64"

# Characters an XML 1.0 attribute can carry verbatim (tab, CR and LF excluded: parsers normalize them)
_XML_SAFE_NAME = re.compile("[\x20-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]+")
_RESERVED_NAMES = {".", ".."}


@dataclass
class LoadedSnapshot:
    originals: PathTree
    candidates: Optional[PathTree] = None
    generated_at: Optional[str] = None
    hashes_discarded: bool = False
    files: List[FileNode] = field(default_factory=list)


class Checkpointer:
    """
    Writes and reads the snapshot file.

    Attributes:
        state_path: Snapshot file location
        algorithm: Algorithm the stored hashes must come from
    """

    def __init__(self, state_path: str, algorithm: Optional[HashAlgorithm] = None):
        self.state_path = state_path
        self.algorithm = algorithm or MD5AlgorithmImpl()

    # =============================
    # Saving
    # =============================

    def save(self, originals: PathTree, candidates: Optional[PathTree] = None) -> None:
        """
        Serializes both forests and replaces the snapshot in a single write.
        Raises RuntimeError if the snapshot cannot be written.
        """
        state = ET.Element(STATE_ELEMENT, {
            "GeneratedAt": datetime.now().isoformat(timespec="seconds"),
            "Algorithm": self.algorithm.name,
        })

        for origin, tree in ((Origin.ORIGINALS, originals), (Origin.DUPLICATE_CANDIDATES, candidates)):
            group = ET.SubElement(state, origin.element_name)
            if tree is not None:
                self._add_directory_contents(tree.root, group)

        ET.indent(state)
        data = ET.tostring(state, encoding="utf-8", xml_declaration=True)

        temp_path = f"{self.state_path}.tmp"
        try:
            with open(temp_path, "wb") as f:
                f.write(data)
            os.replace(temp_path, self.state_path)
        except OSError as e:
            raise RuntimeError(f"Failed to write state file {self.state_path}: {e}") from e

        logger.debug(f"State saved to {self.state_path} ({len(data)} bytes)")

    @classmethod
    def _add_directory_contents(cls, directory: DirectoryNode, parent: ET.Element) -> None:
        for name in sorted(directory.directories):
            folder = ET.Element(FOLDER_ELEMENT)
            cls._add_directory_contents(directory.directories[name], folder)

            # No files anywhere below: nothing worth persisting
            if len(folder) == 0:
                continue

            cls._set_name(folder, name)
            parent.append(folder)

        for name in sorted(directory.files):
            element = ET.SubElement(parent, FILE_ELEMENT)
            cls._set_name(element, name)
            hash_hex = directory.files[name].hash_hex
            if hash_hex:
                element.text = hash_hex

    @staticmethod
    def _set_name(element: ET.Element, name: str) -> None:
        """
        Names that XML cannot hold (control characters, undecodable bytes
        surfaced as surrogates) are stored as base64 of their filesystem bytes.
        """
        if _XML_SAFE_NAME.fullmatch(name):
            element.set(NAME_ATTRIBUTE, name)
        else:
            element.set(ENCODED_NAME_ATTRIBUTE, base64.b64encode(os.fsencode(name)).decode("ascii"))

    # =============================
    # Loading
    # =============================

    def load(self, originals_root: str, candidates_root: Optional[str] = None) -> Optional[LoadedSnapshot]:
        """
        Rebuilds the forests from the snapshot.
        Returns None (and logs a warning) if the file is missing or invalid;
        a partially valid snapshot is never returned.
        """
        if not os.path.isfile(self.state_path):
            logger.warning(f"State file not found: {self.state_path}")
            return None

        try:
            return self._parse(originals_root, candidates_root)
        except (ET.ParseError, OSError, ValueError) as e:
            logger.warning(f"Invalid state file {self.state_path} - restarting from clean state: {e}")
            return None

    def _parse(self, originals_root: str, candidates_root: Optional[str]) -> LoadedSnapshot:
        root = ET.parse(self.state_path).getroot()
        if root.tag != STATE_ELEMENT:
            raise ValueError(f"Unexpected root element <{root.tag}>")

        stored_algorithm = root.get("Algorithm")
        keep_hashes = stored_algorithm is None or stored_algorithm == self.algorithm.name
        if not keep_hashes:
            logger.warning(
                f"State was hashed with '{stored_algorithm}', current algorithm is "
                f"'{self.algorithm.name}': stored hashes will be recomputed"
            )

        originals_element = root.find(Origin.ORIGINALS.element_name)
        candidates_element = root.find(Origin.DUPLICATE_CANDIDATES.element_name)
        if originals_element is None and candidates_element is None:
            originals_element = root

        snapshot = LoadedSnapshot(
            originals=PathTree(originals_root, Origin.ORIGINALS),
            generated_at=root.get("GeneratedAt"),
            hashes_discarded=not keep_hashes,
        )
        if originals_element is not None:
            self._load_directory(snapshot.originals, snapshot.originals.root, originals_element, keep_hashes)

        if candidates_root:
            snapshot.candidates = PathTree(candidates_root, Origin.DUPLICATE_CANDIDATES)
            if candidates_element is not None:
                self._load_directory(snapshot.candidates, snapshot.candidates.root, candidates_element, keep_hashes)
        elif candidates_element is not None and len(candidates_element) > 0:
            logger.warning("State contains duplicate candidates but no candidates directory was given; ignoring them")

        snapshot.files = list(snapshot.originals.iter_files())
        if snapshot.candidates is not None:
            snapshot.files.extend(snapshot.candidates.iter_files())
        return snapshot

    def _load_directory(self, tree: PathTree, directory: DirectoryNode, element: ET.Element, keep_hashes: bool) -> None:
        for child in element:
            if child.tag == FOLDER_ELEMENT:
                name = self._read_name(child)
                folder = directory.directories.get(name)
                if folder is None:
                    folder = DirectoryNode(name=name, parent=directory)
                    directory.directories[name] = folder
                self._load_directory(tree, folder, child, keep_hashes)

            elif child.tag == FILE_ELEMENT:
                name = self._read_name(child)
                text = (child.text or "").strip()
                content_hash = self._parse_hash(text) if text and keep_hashes else None
                tree.insert_file(directory, name, content_hash)

            else:
                logger.debug(f"Ignoring unknown state element <{child.tag}>")

    @staticmethod
    def _read_name(element: ET.Element) -> str:
        """Returns a single path component, rejecting anything that could leave its folder."""
        encoded = element.get(ENCODED_NAME_ATTRIBUTE)
        if encoded is not None:
            try:
                name = os.fsdecode(base64.b64decode(encoded, validate=True))
            except (binascii.Error, ValueError) as e:
                raise ValueError(f"Invalid encoded name '{encoded}'") from e
        else:
            name = element.get(NAME_ATTRIBUTE)

        if not name:
            raise ValueError(f"{element.tag} element without a name")
        separators = [sep for sep in (os.sep, os.altsep, "\0") if sep]
        if name in _RESERVED_NAMES or any(sep in name for sep in separators):
            raise ValueError(f"{element.tag} name '{name}' is not a single path component")
        return name

    def _parse_hash(self, text: str) -> bytes:
        expected = self.algorithm.digest_size * 2
        if len(text) != expected:
            raise ValueError(f"Hash '{text}' has {len(text)} characters, expected {expected}")
        return bytes.fromhex(text)
