import logging
import stat
from pathlib import Path
from typing import Dict, List

logger = logging.getLogger(__name__)

PRIVATE_MODE = stat.S_IRUSR | stat.S_IWUSR
PUBLIC_MODE = PRIVATE_MODE | stat.S_IRGRP | stat.S_IROTH


def apply_permission_policy(pki_dir: Path) -> Dict[Path, int]:
    """
    Lock down private keys and make certificates world-readable.

    Missing directories and files are skipped. Returns the mode applied to
    each file that was touched.
    """
    applied = {}

    for path in _files_in(pki_dir / "private"):
        applied[path] = _chmod(path, PRIVATE_MODE)

    for path in _files_in(pki_dir / "issued"):
        applied[path] = _chmod(path, PUBLIC_MODE)

    ca_cert = pki_dir / "ca.crt"
    if ca_cert.is_file():
        applied[ca_cert] = _chmod(ca_cert, PUBLIC_MODE)

    return applied


def _files_in(directory: Path) -> List[Path]:
    if not directory.is_dir():
        logger.debug("Skipping missing directory %s", directory)
        return []
    return sorted(path for path in directory.iterdir() if path.is_file())


def _chmod(path: Path, mode: int) -> int:
    path.chmod(mode)
    logger.debug("chmod %o %s", mode, path)
    return mode
