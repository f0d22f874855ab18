"""
Sequences the external PKI provider through the lifecycle of one store:
init, CA, server leaf, client leaves, CRL, DH parameters, tunnel key.

Every operation returns a :class:`StageResult` instead of raising. An
operation whose precondition is not met fails without touching the provider,
and :func:`run_pipeline` stops at the first failure. Nothing is retried or
rolled back; the store is left as the provider left it.
"""

import logging
import os
from typing import Callable, List, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, Field

from .crypto import (
    DEFAULT_VALIDITY_DAYS, CertRole, CertificateAuthority, DHParameters, LeafCertificate, PKIStore,
    RevocationList, TunnelKey,
)
from .prompts import DEFAULT_CA_NAME, DEFAULT_SERVER_NAME, default_client_name
from .provider import PKIProvider, ProviderError
from .store import PKILayout, StoreDB

logger = logging.getLogger(__name__)


class StageSuccess(BaseModel):
    stage: str
    created: List[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return True


class StageFailure(BaseModel):
    stage: str
    reason: str

    @property
    def ok(self) -> bool:
        return False


StageResult = Union[StageSuccess, StageFailure]
Stage = Tuple[str, Callable[[], StageResult]]


def run_pipeline(stages: Sequence[Stage]) -> StageResult:
    """Run stages in order, stopping at the first failure."""
    result: StageResult = StageSuccess(stage="empty")
    for name, stage in stages:
        logger.debug("Starting stage %s", name)
        result = stage()
        if not result.ok:
            logger.error("Stage %s failed: %s", result.stage, result.reason)
            return result
        logger.info("Stage %s done", result.stage)
    return result


class LifecycleOrchestrator:
    def __init__(self, provider: PKIProvider, store: PKIStore, db: Optional[StoreDB] = None,
                 encrypt_keys: bool = False):
        self._provider = provider
        self._store = store
        self._db = db
        self._layout = PKILayout(store.root)
        self._nopass = not encrypt_keys

    @property
    def store(self) -> PKIStore:
        return self._store

    @property
    def layout(self) -> PKILayout:
        return self._layout

    def initialize_pki(self) -> StageResult:
        stage = "init-pki"
        root = self._store.root
        try:
            root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return StageFailure(stage=stage, reason=f"Cannot create store root {root}: {e}")
        if not os.access(root, os.W_OK):
            return StageFailure(stage=stage, reason=f"Store root {root} is not writable")

        failure = self._call(stage, self._provider.init_pki)
        if failure:
            return failure

        # init-pki starts from an empty pki directory
        self._store = PKIStore(root=root, initialized=True)
        self._save()
        return StageSuccess(stage=stage, created=[str(self._layout.pki_dir)])

    def build_ca(self, common_name: str = "") -> StageResult:
        stage = "build-ca"
        if not self._store.initialized:
            return StageFailure(stage=stage, reason="PKI store is not initialized")
        if self._store.ca is not None:
            return StageFailure(stage=stage, reason=f"PKI store already has a CA ({self._store.ca.common_name})")

        common_name = common_name.strip() or DEFAULT_CA_NAME
        failure = self._call(stage, lambda: self._provider.build_ca(common_name, nopass=self._nopass))
        if failure:
            return failure

        self._store.ca = CertificateAuthority(
            common_name=common_name,
            key_path=self._layout.ca_key,
            cert_path=self._layout.ca_cert,
            encrypted_key=not self._nopass,
        )
        self._save()
        return StageSuccess(stage=stage, created=[common_name])

    def issue_server_certificate(self, name: str = "", validity_days: int = DEFAULT_VALIDITY_DAYS) -> StageResult:
        name = name.strip() or DEFAULT_SERVER_NAME
        return self._issue_leaf("build-server-full", name, CertRole.SERVER, validity_days)

    def issue_client_certificates(self, count: int, name_for: Callable[[int], str] = default_client_name,
                                  validity_days: int = DEFAULT_VALIDITY_DAYS) -> StageResult:
        stage = "build-client-full"
        missing = self._require_ca(stage)
        if missing:
            return missing
        if count < 1:
            return StageFailure(stage=stage, reason=f"Client count must be a positive integer, got {count}")

        created = []
        for index in range(1, count + 1):
            name = name_for(index).strip() or default_client_name(index)
            result = self._issue_leaf(stage, name, CertRole.CLIENT, validity_days)
            if not result.ok:
                return result
            created.extend(result.created)

        return StageSuccess(stage=stage, created=created)

    def generate_crl(self, validity_days: int = DEFAULT_VALIDITY_DAYS) -> StageResult:
        stage = "gen-crl"
        missing = self._require_ca(stage)
        if missing:
            return missing

        failure = self._call(stage, lambda: self._provider.gen_crl(validity_days))
        if failure:
            return failure

        self._store.crl = RevocationList(
            path=self._layout.crl,
            validity_days=validity_days,
            revoked=[leaf.name for leaf in self._store.leaves if leaf.revoked],
        )
        self._save()
        return StageSuccess(stage=stage, created=[str(self._layout.crl)])

    def generate_dh_parameters(self) -> StageResult:
        stage = "gen-dh"
        if not self._store.initialized:
            return StageFailure(stage=stage, reason="PKI store is not initialized")

        logger.warning("Generating DH parameters, this may take a long time")
        failure = self._call(stage, self._provider.gen_dh)
        if failure:
            return failure

        self._store.dh = DHParameters(path=self._layout.dh)
        self._save()
        return StageSuccess(stage=stage, created=[str(self._layout.dh)])

    def generate_tunnel_key(self) -> StageResult:
        stage = "gen-tls-crypt-key"
        if not self._store.initialized:
            return StageFailure(stage=stage, reason="PKI store is not initialized")

        failure = self._call(stage, self._provider.gen_tunnel_key)
        if failure:
            return failure

        self._store.tunnel_key = TunnelKey(path=self._layout.tunnel_key)
        self._save()
        return StageSuccess(stage=stage, created=[str(self._layout.tunnel_key)])

    def revoke(self, name: str) -> StageResult:
        stage = "revoke"
        missing = self._require_ca(stage)
        if missing:
            return missing

        leaf = self._store.leaf(name)
        if leaf is None:
            return StageFailure(stage=stage, reason=f"No certificate named '{name}' in this store")
        if leaf.revoked:
            return StageFailure(stage=stage, reason=f"Certificate '{name}' is already revoked")

        failure = self._call(stage, lambda: self._provider.revoke(name))
        if failure:
            return failure

        leaf.revoked = True
        self._save()

        crl_days = self._store.crl.validity_days if self._store.crl else DEFAULT_VALIDITY_DAYS
        crl_result = self.generate_crl(crl_days)
        if not crl_result.ok:
            return crl_result
        return StageSuccess(stage=stage, created=[name])

    def _issue_leaf(self, stage: str, name: str, role: CertRole, validity_days: int) -> StageResult:
        missing = self._require_ca(stage)
        if missing:
            return missing
        if self._store.leaf(name) is not None or name == self._layout.ca_key.stem:
            return StageFailure(stage=stage, reason=f"A certificate named '{name}' already exists")

        failure = self._call(stage, lambda: self._provider.build_leaf(name, role, validity_days, nopass=self._nopass))
        if failure:
            return failure

        self._store.leaves.append(LeafCertificate(
            name=name,
            role=role,
            validity_days=validity_days,
            key_path=self._layout.private_key(name),
            cert_path=self._layout.issued_cert(name),
            encrypted_key=not self._nopass,
            issuer=self._store.ca.common_name,
        ))
        self._save()
        return StageSuccess(stage=stage, created=[name])

    def _require_ca(self, stage: str) -> Optional[StageFailure]:
        if self._store.ca is None:
            return StageFailure(stage=stage, reason="No CA exists in this PKI store; build the CA first")
        return None

    def _call(self, stage: str, func: Callable[[], None]) -> Optional[StageFailure]:
        try:
            func()
        except ProviderError as e:
            return StageFailure(stage=stage, reason=str(e))
        return None

    def _save(self):
        if self._db is not None:
            self._db.save(self._store)
