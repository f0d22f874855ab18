from pathlib import Path
from typing import List, Optional
from enum import Enum, unique

from pydantic import BaseModel, Field


DEFAULT_VALIDITY_DAYS = 3650


@unique
class CertRole(Enum):
    """
    What a leaf certificate is issued for.
    """
    SERVER = "server"
    CLIENT = "client"


class CertificateAuthority(BaseModel):
    common_name: str
    key_path: Path
    cert_path: Path
    encrypted_key: bool = False


class LeafCertificate(BaseModel):
    name: str
    role: CertRole
    validity_days: int = DEFAULT_VALIDITY_DAYS
    key_path: Path
    cert_path: Path
    encrypted_key: bool = False
    issuer: str
    revoked: bool = False


class RevocationList(BaseModel):
    path: Path
    validity_days: int = DEFAULT_VALIDITY_DAYS
    revoked: List[str] = Field(default_factory=list)


class DHParameters(BaseModel):
    path: Path


class TunnelKey(BaseModel):
    path: Path


class PKIStore(BaseModel):
    root: Path
    initialized: bool = False
    ca: Optional[CertificateAuthority] = None
    leaves: List[LeafCertificate] = Field(default_factory=list)
    crl: Optional[RevocationList] = None
    dh: Optional[DHParameters] = None
    tunnel_key: Optional[TunnelKey] = None

    def leaf(self, name: str) -> Optional[LeafCertificate]:
        return next((leaf for leaf in self.leaves if leaf.name == name), None)

    def leaves_for_role(self, role: CertRole) -> List[LeafCertificate]:
        return [leaf for leaf in self.leaves if leaf.role == role]
