import io
import logging
import stat
import tarfile
from pathlib import Path, PurePosixPath

import requests

from .host import PreconditionError

logger = logging.getLogger(__name__)

EASYRSA_SCRIPT = "easyrsa"


def fetch_easyrsa(target_dir: Path, url: str, timeout: float = 60.0) -> Path:
    """
    Download the Easy-RSA release tarball from ``url`` and unpack it into
    ``target_dir`` without its top-level directory.

    Returns the path of the executable ``easyrsa`` script.
    """
    logger.info("Downloading easy-rsa from %s", url)
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise PreconditionError(f"Failed to download easy-rsa. Please check your internet connection. ({e})")

    target_dir.mkdir(parents=True, exist_ok=True)
    try:
        with tarfile.open(fileobj=io.BytesIO(response.content), mode="r:gz") as tar:
            _extract_stripped(tar, target_dir)
    except (tarfile.TarError, OSError) as e:
        raise PreconditionError(f"Failed to extract easy-rsa: {e}")

    return ensure_executable(target_dir / EASYRSA_SCRIPT)


def ensure_executable(script: Path) -> Path:
    if not script.is_file():
        raise PreconditionError(f"{script.name} not found at {script}.")
    mode = script.stat().st_mode
    script.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


def _extract_stripped(tar: tarfile.TarFile, target_dir: Path):
    root = target_dir.resolve()
    for member in tar.getmembers():
        parts = PurePosixPath(member.name).parts[1:]
        if not parts:
            continue
        if member.issym() or member.islnk():
            logger.debug("Skipping link %s", member.name)
            continue

        member.name = str(PurePosixPath(*parts))
        destination = (root / member.name).resolve()
        if root != destination and root not in destination.parents:
            raise PreconditionError(f"Refusing to extract {member.name} outside of {target_dir}")

        tar.extract(member, root, filter="data")
