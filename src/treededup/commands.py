"""
Unified command orchestrator for a discovery/hash/relocate run.
This is the SINGLE source of truth for business logic, used by the CLI and by library callers.

Run states:
    IDLE → LOADING_SNAPSHOT (resume only) → DISCOVERING (unless skipped)
         → HASHING → RESOLVING_DUPLICATES (destination only) → DONE

Cancellation seen while discovering or hashing ends in CANCELLED after one
final checkpoint. Cancellation while relocating ends in CANCELLED without a
checkpoint: relocation does not change any hash state.
"""
import os
import time
import logging
from typing import Callable, Optional

from treededup.core.cancellation import CancellationToken
from treededup.core.checkpoint import Checkpointer
from treededup.core.discoverer import TreeDiscoverer
from treededup.core.hash_index import HashIndex
from treededup.core.hasher import HasherImpl, get_algorithm
from treededup.core.hashing import HashingLoop
from treededup.core.interfaces import FileSystem
from treededup.core.models import Origin, RunParams, RunReport, RunState, is_within
from treededup.core.path_tree import PathTree
from treededup.core.resolver import DuplicateResolver
from treededup.services.file_service import FileService

logger = logging.getLogger(__name__)

DISCOVERY_PROGRESS_INTERVAL = 1000


class DeduplicationCommand:
    """
    Orchestrates the entire workflow:
    1. Validate roots and create the destination
    2. Load the snapshot when resuming
    3. Discover new files under each root
    4. Hash every file still lacking a hash, checkpointing along the way
    5. Move duplicates into the destination tree

    Usage:
        params = RunParams(root_dir="/photos", destination_dir="/photos-dupes", resume=True)
        token = CancellationToken()
        report = DeduplicationCommand().execute(
            params,
            progress_callback=cli_progress_printer,
            stopped_flag=token.is_cancelled
        )
    """

    def __init__(self, file_system: Optional[FileSystem] = None):
        self.file_system = file_system or FileService
        self.state = RunState.IDLE
        self.index = HashIndex()
        self.originals: Optional[PathTree] = None
        self.candidates: Optional[PathTree] = None
        self.checkpointer: Optional[Checkpointer] = None
        self.report = RunReport()

    def execute(
            self,
            params: RunParams,
            progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None,
            stopped_flag: Optional[Callable[[], bool]] = None
    ) -> RunReport:
        """
        Execute one run with the given parameters.

        Args:
            params: Validated run parameters
            progress_callback: (stage: str, current: int, total: Optional[int]) -> None
            stopped_flag: () -> bool (returns True if the run should stop)

        Returns:
            RunReport with counters, duplicate groups and final state

        Raises:
            RuntimeError: If pre-flight validation fails or a checkpoint cannot be written
        """
        stopped_flag = stopped_flag or CancellationToken()
        start_time = time.time()

        self._preflight(params)

        algorithm = get_algorithm(params.algorithm)
        self.checkpointer = Checkpointer(params.state_path, algorithm)
        self.index = HashIndex()
        self.report = RunReport()
        self.originals = PathTree(params.root_dir, Origin.ORIGINALS)
        self.candidates = (
            PathTree(params.duplicate_candidates_dir, Origin.DUPLICATE_CANDIDATES)
            if params.duplicate_candidates_dir else None
        )

        try:
            if params.resume:
                self._load_snapshot(params)

            if not params.skip_filesystem_scan:
                if not self._discover(params, stopped_flag, progress_callback):
                    return self._finish(RunState.CANCELLED)

            if not self._hash(params, stopped_flag, progress_callback):
                return self._finish(RunState.CANCELLED)

            self.report.duplicate_groups = self.index.groups_with_duplicates()
            if not self.report.duplicate_groups:
                logger.info("No duplicate files found")
            else:
                logger.info(
                    f"Files with duplicates: {len(self.report.duplicate_groups)}, "
                    f"total duplicates: {self.report.duplicate_file_count}"
                )

            if params.destination_dir and self.report.duplicate_groups:
                if not self._resolve(params, stopped_flag, progress_callback):
                    return self._finish(RunState.CANCELLED)

            return self._finish(RunState.DONE)
        finally:
            self.report.total_time = time.time() - start_time

    # =============================
    # Phases
    # =============================

    def _preflight(self, params: RunParams) -> None:
        for root in params.scanned_roots:
            if not os.path.isdir(root):
                error_msg = f"Root directory '{root}' wasn't found"
                logger.error(error_msg)
                raise RuntimeError(error_msg)

        if params.destination_dir and not os.path.isdir(params.destination_dir):
            try:
                self.file_system.make_dirs(params.destination_dir)
            except OSError as e:
                error_msg = f"Unable to create directory for duplicates at '{params.destination_dir}': {e}"
                logger.error(error_msg)
                raise RuntimeError(error_msg) from e

    def _load_snapshot(self, params: RunParams) -> None:
        self._transition(RunState.LOADING_SNAPSHOT)
        if not os.path.isfile(params.state_path):
            logger.info("State file not found, loading information from the file system")
            return

        snapshot = self.checkpointer.load(params.root_dir, params.duplicate_candidates_dir)
        if snapshot is None:
            return

        self.originals = snapshot.originals
        if snapshot.candidates is not None:
            self.candidates = snapshot.candidates

        # Replaying classification restores groups and the pending-hash queue
        for file in snapshot.files:
            self.index.add(file)
        self.report.loaded_files = len(snapshot.files)
        logger.info(
            f"State loaded: {self.report.loaded_files} file(s), "
            f"{self.index.pending_count} awaiting hashes"
        )

    def _discover(self, params: RunParams, stopped_flag, progress_callback) -> bool:
        """Returns False if discovery was cancelled."""
        self._transition(RunState.DISCOVERING)

        trees = [self.originals] + ([self.candidates] if self.candidates is not None else [])
        for tree in trees:
            if stopped_flag():
                break

            # Another scanned root nested inside this one belongs to its own tree
            excluded = [root for root in params.scanned_roots if is_within(root, tree.root_path)]
            if params.destination_dir:
                excluded.append(params.destination_dir)

            discoverer = TreeDiscoverer(tree, excluded_dirs=excluded, file_system=self.file_system)
            for file in discoverer.discover(stopped_flag=stopped_flag):
                self.index.add(file)
                self.report.discovered_files += 1
                if progress_callback and self.report.discovered_files % DISCOVERY_PROGRESS_INTERVAL == 0:
                    progress_callback("discovering", self.report.discovered_files, None)

        if progress_callback and self.report.discovered_files:
            progress_callback("discovering", self.report.discovered_files, None)

        cancelled = stopped_flag()
        if cancelled:
            logger.warning("Execution cancelled: saving state for resuming later")

        if self.report.discovered_files > 0 or cancelled:
            self._save_checkpoint()

        return not cancelled

    def _hash(self, params: RunParams, stopped_flag, progress_callback) -> bool:
        """Returns False if hashing was cancelled."""
        self._transition(RunState.HASHING)

        if self.index.pending_count == 0:
            logger.info("No files needed hashing")
            return True

        loop = HashingLoop(
            self.index,
            HasherImpl(get_algorithm(params.algorithm), file_system=self.file_system),
            checkpoint=self._save_checkpoint,
            checkpoint_interval=params.checkpoint_interval,
        )
        result = loop.run(stopped_flag=stopped_flag, progress_callback=progress_callback)
        self.report.hashed_files = result.hashed
        self.report.failed_hashes = result.failed

        if result.cancelled:
            logger.warning("Execution cancelled: saving state for resuming later")

        if result.hashed > 0 or result.cancelled:
            self._save_checkpoint()

        return not result.cancelled

    def _resolve(self, params: RunParams, stopped_flag, progress_callback) -> bool:
        """Returns False if relocation was cancelled."""
        self._transition(RunState.RESOLVING_DUPLICATES)

        resolver = DuplicateResolver(
            params.destination_dir,
            source_roots={
                Origin.ORIGINALS: params.root_dir,
                Origin.DUPLICATE_CANDIDATES: params.duplicate_candidates_dir,
            },
            relocate_originals=params.relocate_originals,
            file_system=self.file_system,
        )
        result = resolver.resolve(self.report.duplicate_groups, stopped_flag=stopped_flag,
                                  progress_callback=progress_callback)
        self.report.moved_files = result.moved
        self.report.skipped_moves = result.skipped + result.failed
        logger.info(f"Files moved: {result.moved}")

        return not result.cancelled

    # =============================
    # Helpers
    # =============================

    def _save_checkpoint(self) -> None:
        self.checkpointer.save(self.originals, self.candidates)
        self.report.checkpoints_written += 1

    def _transition(self, state: RunState) -> None:
        logger.debug(f"Run state: {self.state.value} -> {state.value}")
        self.state = state
        self.report.state = state

    def _finish(self, state: RunState) -> RunReport:
        self._transition(state)
        return self.report
