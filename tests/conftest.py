"""Pytest configuration and shared fixtures."""

from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import pytest

from vpnca.crypto import CertRole, PKIStore
from vpnca.orchestrator import LifecycleOrchestrator
from vpnca.provider import PKIProvider, ProviderError
from vpnca.store import PKILayout, StoreDB


class FakeProvider(PKIProvider):
    """Records every call and writes the files easyrsa would write."""

    def __init__(self, root: Path, fail_on: Optional[str] = None):
        self.layout = PKILayout(root)
        self.calls: List[Tuple] = []
        self.fail_on = fail_on

    def _record(self, *call):
        self.calls.append(call)
        if call[0] == self.fail_on:
            raise ProviderError(f"easyrsa {call[0]} failed with exit code 1")

    def _touch(self, path: Path, content: str = "fake"):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)

    @property
    def names(self) -> List[str]:
        return [call[0] for call in self.calls]

    def init_pki(self):
        self._record("init-pki")
        self.layout.private_dir.mkdir(parents=True, exist_ok=True)
        self.layout.issued_dir.mkdir(parents=True, exist_ok=True)

    def build_ca(self, common_name: str, nopass: bool = True):
        self._record("build-ca", common_name, nopass)
        self._touch(self.layout.ca_cert, f"CN={common_name}")
        self._touch(self.layout.ca_key)

    def build_leaf(self, name: str, role: CertRole, validity_days: int, nopass: bool = True):
        self._record(f"build-{role.value}-full", name, validity_days, nopass)
        self._touch(self.layout.issued_cert(name), f"CN={name}")
        self._touch(self.layout.private_key(name))

    def revoke(self, name: str):
        self._record("revoke", name)

    def gen_crl(self, validity_days: int):
        self._record("gen-crl", validity_days)
        self._touch(self.layout.crl)

    def gen_dh(self):
        self._record("gen-dh")
        self._touch(self.layout.dh)

    def gen_tunnel_key(self):
        self._record("gen-tls-crypt-key")
        self._touch(self.layout.tunnel_key)


def scripted(answers: Iterable[str]):
    """An ``ask`` callable that replays answers and remembers the questions."""
    remaining = list(answers)
    questions = []

    def ask(question: str) -> str:
        questions.append(question)
        if not remaining:
            raise AssertionError(f"Unexpected prompt: {question!r}")
        return remaining.pop(0)

    ask.questions = questions
    ask.remaining = remaining
    return ask


@pytest.fixture
def store_root(tmp_path):
    """A fresh store root for each test."""
    root = tmp_path / "certificates"
    root.mkdir()
    return root


@pytest.fixture
def fake_provider(store_root):
    return FakeProvider(store_root)


@pytest.fixture
def store_db(store_root):
    return StoreDB(store_root)


@pytest.fixture
def orchestrator(fake_provider, store_root, store_db):
    return LifecycleOrchestrator(fake_provider, PKIStore(root=store_root), store_db)


@pytest.fixture
def orchestrator_with_ca(orchestrator):
    """Orchestrator whose store is initialized and holds a CA."""
    assert orchestrator.initialize_pki().ok
    assert orchestrator.build_ca("Test CA").ok
    return orchestrator
