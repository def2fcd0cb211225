"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/hashing.py
Sequential hashing of every file queued in the HashIndex.

Each successfully hashed file is fed straight back into the index. Files that
cannot be read are skipped for this run and keep their unset hash. Every
`checkpoint_interval` successful hashes the checkpoint callback runs, so an
interruption loses at most one interval of work.
"""

from dataclasses import dataclass
from typing import Callable, Optional
import time
import logging

from treededup.core.hash_index import HashIndex
from treededup.core.interfaces import Hasher
from treededup.core.models import DEFAULT_CHECKPOINT_INTERVAL

logger = logging.getLogger(__name__)


@dataclass
class HashingResult:
    hashed: int = 0
    failed: int = 0
    checkpoints: int = 0
    cancelled: bool = False


class HashingLoop:
    """
    Drains the pending-hash queue of a HashIndex one file at a time.

    Attributes:
        index: HashIndex providing pending files and receiving hashed ones
        hasher: Computes whole-file content hashes
        checkpoint: Called after every `checkpoint_interval` successful hashes
        checkpoint_interval: Successful hashes between checkpoints
    """

    def __init__(
        self,
        index: HashIndex,
        hasher: Hasher,
        checkpoint: Optional[Callable[[], None]] = None,
        checkpoint_interval: int = DEFAULT_CHECKPOINT_INTERVAL,
    ):
        if checkpoint_interval <= 0:
            raise ValueError("Checkpoint interval must be a positive number")
        self.index = index
        self.hasher = hasher
        self.checkpoint = checkpoint
        self.checkpoint_interval = checkpoint_interval

    def run(
        self,
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, object], None]] = None,
    ) -> HashingResult:
        result = HashingResult()
        total = self.index.pending_count
        hashed_since_checkpoint = 0
        start_time = time.time()

        logger.info(f"Hashing {total} file(s)")

        while self.index.pending_count > 0:
            if stopped_flag and stopped_flag():
                logger.info("Hashing interrupted by user")
                result.cancelled = True
                break

            file = self.index.next_pending()
            try:
                digest = self.hasher.compute_full_hash(file)
            except PermissionError as e:
                result.failed += 1
                logger.warning(f"Permission denied, couldn't hash: {file.full_path} ({e})")
                continue
            except FileNotFoundError:
                result.failed += 1
                logger.warning(f"File vanished before hashing: {file.full_path}")
                continue
            except OSError as e:
                result.failed += 1
                logger.warning(f"Couldn't hash: {file.full_path} ({e})")
                continue

            file.set_hash(digest)
            self.index.add(file)
            result.hashed += 1
            hashed_since_checkpoint += 1

            if progress_callback:
                progress_callback("hashing", result.hashed + result.failed, total)

            if self.checkpoint and hashed_since_checkpoint >= self.checkpoint_interval:
                logger.debug(f"Checkpoint after {hashed_since_checkpoint} hashes")
                self.checkpoint()
                result.checkpoints += 1
                hashed_since_checkpoint = 0

        elapsed_time = time.time() - start_time
        logger.info(f"Hashed {result.hashed} file(s) in {elapsed_time:.2f} seconds ({result.failed} failed)")
        return result
