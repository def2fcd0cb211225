#!/usr/bin/env python3
"""
treededup CLI: command line interface for resumable duplicate file detection.
Progress is saved to a state file so an interrupted run (Ctrl+C) can be resumed.
Files are never deleted: duplicates are only moved into a destination tree.
"""
from __future__ import annotations  # Enable postponed evaluation of annotations (PEP 563)
import argparse
import signal
import sys
import os
import time
from pathlib import Path
from typing import List, Optional, NoReturn
import logging

LOG_FORMAT = "%(levelname)-8s | %(name)-25s | %(message)s"

logging.basicConfig(
    level=logging.WARNING,
    format=LOG_FORMAT
)

# === EARLY DEPENDENCY VALIDATION ===
_MISSING_DEPS = []
try:
    import xxhash
except ImportError:
    _MISSING_DEPS.append("xxhash")

if _MISSING_DEPS:
    print("❌ Missing required dependencies:", file=sys.stderr)
    print(f"   pip install {' '.join(_MISSING_DEPS)}", file=sys.stderr)
    sys.exit(1)

# === NORMAL IMPORTS (after validation) ===
from treededup.core.cancellation import CancellationToken
from treededup.core.models import DuplicatesGroup, Origin, RunParams, RunReport
from treededup.commands import DeduplicationCommand
from treededup.aliases import ALGORITHM_ALIASES, ALGORITHM_CHOICES, ALGORITHM_HELP_TEXT, EPILOG_TEXT


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self):
        self.start_time: float = time.time()
        self.verbose: bool = False
        self.quiet: bool = False
        self.token = CancellationToken()

        # Fix encoding for Windows consoles to prevent UnicodeEncodeError
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding='utf-8')
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding='utf-8')

    @staticmethod
    def parse_args(args=None) -> argparse.Namespace:
        """Parse command-line arguments."""
        parser = argparse.ArgumentParser(
            description="treededup: resumable duplicate file finder",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )

        # Required arguments
        parser.add_argument(
            "--root", "-r", "--originals", "-o",
            required=True,
            type=str,
            dest="root",
            help="Directory to search for duplicates (the originals tree)"
        )

        # Trees
        parser.add_argument(
            "--duplicate-candidates", "-c",
            default=None,
            type=str,
            dest="duplicate_candidates",
            help="Second directory whose files are checked against the originals"
        )
        parser.add_argument(
            "--destination", "-d",
            default=None,
            type=str,
            help="Directory duplicates are moved into (mirroring their relative paths).\n"
                 "Without it, duplicates are only reported."
        )
        parser.add_argument(
            "--find-dupes-in-originals",
            action="store_true",
            dest="find_dupes_in_originals",
            help="With --duplicate-candidates: also move duplicates found inside the originals tree"
        )

        # State options
        parser.add_argument(
            "--state", "-s",
            default="state.xml",
            type=str,
            help="State file path. Default: state.xml in the working directory"
        )
        parser.add_argument(
            "--resume",
            action="store_true",
            help="Load the state file and continue from where it was"
        )
        parser.add_argument(
            "--skip-scan",
            action="store_true",
            dest="skip_scan",
            help="Skip checking the file system; only the saved state determines work"
        )
        parser.add_argument(
            "--checkpoint-interval",
            default=50_000,
            type=int,
            metavar='N',
            dest="checkpoint_interval",
            help="Save state after every N hashed files. Default: 50000"
        )
        parser.add_argument(
            "--algorithm",
            choices=ALGORITHM_CHOICES,
            default="md5",
            type=str,
            help=ALGORITHM_HELP_TEXT
        )

        # Output options
        parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Suppress non-essential output"
        )
        parser.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Show progress and informational log messages"
        )
        parser.add_argument(
            "--debug",
            action="store_true",
            help="Show debug log messages"
        )

        return parser.parse_args(args)

    def validate_args(self, args: argparse.Namespace) -> None:
        """Validate command-line arguments before execution."""
        if args.skip_scan and not args.resume:
            self.error_exit("--skip-scan requires --resume (there is no state to work from)")

        if args.find_dupes_in_originals and not args.duplicate_candidates:
            self.warning("--find-dupes-in-originals has no effect without --duplicate-candidates")

        root_path = Path(args.root).resolve()
        if not root_path.exists():
            self.error_exit(f"Directory not found: {args.root}")
        if not root_path.is_dir():
            self.error_exit(f"Path is not a directory: {args.root}")

        if args.duplicate_candidates:
            candidates_path = Path(args.duplicate_candidates).resolve()
            if not candidates_path.is_dir():
                self.error_exit(f"Duplicate candidates directory not found: {args.duplicate_candidates}")

        if args.checkpoint_interval <= 0:
            self.error_exit("Checkpoint interval must be a positive number")

        if args.resume and not Path(args.state).exists():
            self.warning(f"State file not found: {args.state} (starting from the file system)")

    def create_params(self, args: argparse.Namespace) -> RunParams:
        """Create RunParams from CLI arguments."""
        try:
            return RunParams(
                root_dir=str(Path(args.root).resolve()),
                duplicate_candidates_dir=str(Path(args.duplicate_candidates).resolve())
                if args.duplicate_candidates else None,
                destination_dir=str(Path(args.destination).resolve()) if args.destination else None,
                state_path=args.state,
                resume=args.resume,
                skip_filesystem_scan=args.skip_scan,
                find_dupes_in_originals=args.find_dupes_in_originals,
                checkpoint_interval=args.checkpoint_interval,
                algorithm=ALGORITHM_ALIASES[args.algorithm],
            )
        except ValueError as e:
            self.error_exit(f"Parameter error: {e}")

    def progress_callback(self, stage: str, current: int, total: Optional[int]) -> None:
        """CLI progress callback - shows progress in console."""
        if not self.verbose:
            return

        if total and total > 0:
            percent = (current / total) * 100
            sys.stderr.write(
                f"\r  [{stage}] {current}/{total} ({percent:.1f}%)"
            )
        else:
            sys.stderr.write(f"\r  [{stage}] {current} files...")
        sys.stderr.flush()

    def handle_interrupt(self, signum, frame) -> None:
        """First Ctrl+C requests a graceful stop; a second one aborts immediately."""
        self.token.cancel()
        signal.signal(signal.SIGINT, signal.default_int_handler)
        print("\n⚠️  Cancelling: finishing current file and saving state (Ctrl+C again to abort)",
              file=sys.stderr)

    def run_deduplication(self, params: RunParams) -> RunReport:
        """Execute the run with cooperative cancellation."""
        command = DeduplicationCommand()
        previous_handler = signal.signal(signal.SIGINT, self.handle_interrupt)
        try:
            report = command.execute(
                params,
                progress_callback=self.progress_callback if self.verbose else None,
                stopped_flag=self.token.is_cancelled
            )
        except RuntimeError as e:
            self.error_exit(f"Run failed: {e}")
        finally:
            signal.signal(signal.SIGINT, previous_handler)

        if self.verbose:
            sys.stderr.write("\n")
        if not self.quiet:
            print()
            print(report.print_summary())

        return report

    def output_results(self, groups: List[DuplicatesGroup], two_roots: bool = False) -> None:
        """Output duplicate groups as plain text, canonical file first."""
        if self.quiet:
            return

        if not groups:
            print("No duplicate files found.")
            return

        total_duplicates = sum(len(g.duplicates) for g in groups)
        print(f"\nFiles with duplicates: {len(groups)} (total duplicates: {total_duplicates})")

        for idx, group in enumerate(groups, 1):
            print(f"\n📁 Group {idx} | Hash: {group.canonical.hash_hex} | Files: {len(group)}")
            print(f"   [KEEP] {self._describe(group.canonical, two_roots)}")
            for file in group.duplicates:
                print(f"   [DUP]  {self._describe(file, two_roots)}")

    @staticmethod
    def _describe(file, two_roots: bool) -> str:
        if not two_roots:
            return file.full_path
        marker = "original" if file.origin is Origin.ORIGINALS else "candidate"
        return f"{file.full_path} ({marker})"

    def warning(self, message: str) -> None:
        """Print a warning message to stderr."""
        if not self.quiet:
            print(f"⚠️  {message}", file=sys.stderr)

    @staticmethod
    def error_exit(message: str, code: int = 1) -> NoReturn:
        """Print error and exit."""
        print(f"❌ Error: {message}", file=sys.stderr)
        sys.exit(code)

    def run(self, args=None) -> int:
        """Main entry point. Returns the process exit code."""
        args = self.parse_args(args)
        self.verbose = args.verbose or args.debug
        self.quiet = args.quiet

        if args.debug:
            logging.getLogger().setLevel(logging.DEBUG)
        elif args.verbose:
            logging.getLogger().setLevel(logging.INFO)
        elif args.quiet:
            logging.getLogger().setLevel(logging.ERROR)

        self.validate_args(args)
        params = self.create_params(args)

        if not self.quiet:
            print(f"Root: {params.root_dir}")
            if params.duplicate_candidates_dir:
                print(f"Duplicate candidates: {params.duplicate_candidates_dir}")

        report = self.run_deduplication(params)

        if report.cancelled:
            print(f"\n⚠️  Run cancelled. State saved to {params.state_path}; "
                  f"use --resume to continue.", file=sys.stderr)
            return 130

        self.output_results(report.duplicate_groups, two_roots=params.duplicate_candidates_dir is not None)

        if params.destination_dir and not self.quiet:
            print(f"\nFiles moved: {report.moved_files}")

        # Show completion time
        elapsed = time.time() - self.start_time
        if self.verbose:
            print(f"\n✅ Completed in {elapsed:.2f} seconds")
        return 0


def main() -> None:
    """Application entry point."""
    app = CLIApplication()
    try:
        sys.exit(app.run())
    except KeyboardInterrupt:
        print("\n⚠️  Operation aborted by user (Ctrl+C)")
        sys.exit(130)
    except Exception as e:
        if os.environ.get("DEBUG"):
            raise
        print(f"❌ Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
