import json
import logging
from pathlib import Path

from .crypto import PKIStore

logger = logging.getLogger(__name__)


class PKILayout:
    """Where the provider puts each artifact, relative to the store root."""

    TUNNEL_KEY_NAME = "easyrsa-tls.key"

    def __init__(self, root: Path):
        self.root = root
        self.pki_dir = root / "pki"
        self.private_dir = self.pki_dir / "private"
        self.issued_dir = self.pki_dir / "issued"
        self.ca_cert = self.pki_dir / "ca.crt"
        self.ca_key = self.private_dir / "ca.key"
        self.crl = self.pki_dir / "crl.pem"
        self.dh = self.pki_dir / "dh.pem"
        self.tunnel_key = self.private_dir / self.TUNNEL_KEY_NAME

    def issued_cert(self, name: str) -> Path:
        return self.issued_dir / f"{name}.crt"

    def private_key(self, name: str) -> Path:
        return self.private_dir / f"{name}.key"


class StoreDB:
    """
    Keeps a JSON record of the PKI Store next to the ``pki`` directory so
    that later runs (revoke, ls) know the role and issuer of every leaf.
    """
    CURRENT_VERSION = "1.0"
    FILE_NAME = "vpnca.json"

    def __init__(self, root: Path):
        self._path = root
        self._db_file = self._path / self.FILE_NAME

    @property
    def path(self) -> Path:
        return self._db_file

    def exists(self) -> bool:
        return self._db_file.exists()

    def load(self) -> PKIStore:
        with open(self._db_file, "r") as f:
            data = json.load(f)
        db_version = data.get("version")
        if db_version != self.CURRENT_VERSION:
            raise ValueError(f"Unsupported store record version: {db_version}. Expected: {self.CURRENT_VERSION}")
        store = PKIStore.model_validate(data["store"])
        logger.info(f"Loaded store record from {self._db_file}")
        return store

    def save(self, store: PKIStore):
        self._path.mkdir(parents=True, exist_ok=True)
        data = {
            "version": self.CURRENT_VERSION,
            "store": store.model_dump(mode="json"),
        }
        with open(self._db_file, "w") as f:
            json.dump(data, f, indent=2)
        logger.debug(f"Saved store record to {self._db_file}")
