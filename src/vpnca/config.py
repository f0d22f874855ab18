from argparse import Namespace
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from .crypto import DEFAULT_VALIDITY_DAYS


EASYRSA_VERSION = "3.2.4"
EASYRSA_URL = f"https://github.com/OpenVPN/easy-rsa/releases/download/v{EASYRSA_VERSION}/EasyRSA-{EASYRSA_VERSION}.tgz"
DEFAULT_STORE_ROOT = Path("/root/certificates")


class Settings(BaseModel):
    store_root: Path = DEFAULT_STORE_ROOT
    easyrsa_url: str = EASYRSA_URL
    # Set when the operator points at an existing easyrsa script; skips the download.
    easyrsa: Optional[Path] = None
    validity_days: int = DEFAULT_VALIDITY_DAYS
    # Keys are written without a passphrase unless the operator asks otherwise.
    encrypt_keys: bool = False
    root_check: bool = True
    download_timeout: float = 60.0

    @property
    def easyrsa_path(self) -> Path:
        return self.easyrsa if self.easyrsa else self.store_root / "easyrsa"

    @classmethod
    def from_namespace(cls, ns: Namespace) -> "Settings":
        values = {"store_root": ns.store_root}
        for field in ("easyrsa_url", "easyrsa", "encrypt_keys"):
            value = getattr(ns, field, None)
            if value is not None:
                values[field] = value
        if getattr(ns, "no_root_check", False):
            values["root_check"] = False
        return cls(**values)
