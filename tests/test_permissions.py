"""Tests for the file-permission policy applied to generated artifacts."""

import stat

import pytest

from vpnca.permissions import apply_permission_policy


def _mode(path):
    return stat.S_IMODE(path.stat().st_mode)


@pytest.fixture
def pki_dir(tmp_path):
    pki = tmp_path / "pki"
    (pki / "private").mkdir(parents=True)
    (pki / "issued").mkdir()
    for path in (pki / "private" / "ca.key", pki / "private" / "vpn1.key", pki / "private" / "easyrsa-tls.key"):
        path.write_text("key")
        path.chmod(0o666)
    for path in (pki / "issued" / "vpn1.crt", pki / "ca.crt", pki / "crl.pem"):
        path.write_text("cert")
        path.chmod(0o600)
    return pki


@pytest.mark.unit
class TestPermissionPolicy:
    def test_private_keys_are_owner_only(self, pki_dir):
        apply_permission_policy(pki_dir)

        for key in (pki_dir / "private").iterdir():
            assert _mode(key) == 0o600

    def test_certificates_are_world_readable(self, pki_dir):
        apply_permission_policy(pki_dir)

        assert _mode(pki_dir / "issued" / "vpn1.crt") == 0o644
        assert _mode(pki_dir / "ca.crt") == 0o644

    def test_other_files_untouched(self, pki_dir):
        applied = apply_permission_policy(pki_dir)

        assert pki_dir / "crl.pem" not in applied
        assert _mode(pki_dir / "crl.pem") == 0o600

    def test_idempotent(self, pki_dir):
        apply_permission_policy(pki_dir)
        first = {path: _mode(path) for path in pki_dir.rglob("*") if path.is_file()}

        apply_permission_policy(pki_dir)
        second = {path: _mode(path) for path in pki_dir.rglob("*") if path.is_file()}

        assert first == second

    def test_missing_directories_are_skipped(self, tmp_path):
        pki = tmp_path / "pki"
        pki.mkdir()

        assert apply_permission_policy(pki) == {}

    def test_missing_pki_dir_is_skipped(self, tmp_path):
        assert apply_permission_policy(tmp_path / "nowhere") == {}
