from treededup.core.models import HashAlgorithmKind

ALGORITHM_ALIASES = {
    "md5": HashAlgorithmKind.MD5,
    "sha256": HashAlgorithmKind.SHA256,
    "xxh128": HashAlgorithmKind.XXH128,
}

ALGORITHM_CHOICES = list(ALGORITHM_ALIASES.keys())

ALGORITHM_HELP_TEXT = (
    "Content hash algorithm:\n"
    "  md5     : 16-byte digest (default, compatible with older state files)\n"
    "  sha256  : 32-byte digest (slowest)\n"
    "  xxh128  : 16-byte non-cryptographic digest (fastest)\n"
    "A state file written with one algorithm is re-hashed when resumed with another.\n"
)

EPILOG_TEXT = """
Examples:
  Find duplicates in Photos, saving progress to state.xml
  %(prog)s -r ~/Photos

  Resume an interrupted run and move duplicates out of the tree
  %(prog)s -r ~/Photos -d ~/Photos-duplicates --resume

  Compare a backup against the originals; only the backup loses files
  %(prog)s -o ~/Photos -c /mnt/backup/Photos -d ~/backup-duplicates -s backup-state.xml

  Re-run from saved state only, without walking the disk again
  %(prog)s -r ~/Photos -d ~/Photos-duplicates --resume --skip-scan
"""
