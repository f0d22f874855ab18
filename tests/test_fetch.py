"""Tests for downloading and unpacking easy-rsa."""

import io
import os
import tarfile

import pytest
import requests

from vpnca import fetch
from vpnca.fetch import fetch_easyrsa, ensure_executable
from vpnca.host import PreconditionError


def _tarball(files):
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for name, content in files.items():
            data = content.encode()
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


class FakeResponse:
    def __init__(self, content=b"", status_code=200):
        self.content = content
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


@pytest.fixture
def serve(monkeypatch):
    """Make requests.get return the given response and remember the URL."""
    requested = []

    def install(response):
        def fake_get(url, timeout=None):
            requested.append((url, timeout))
            if isinstance(response, Exception):
                raise response
            return response
        monkeypatch.setattr(fetch.requests, "get", fake_get)
        return requested

    return install


@pytest.mark.unit
class TestFetchEasyRSA:
    def test_strips_top_level_directory(self, serve, tmp_path):
        requested = serve(FakeResponse(_tarball({
            "EasyRSA-3.2.4/easyrsa": "#!/bin/sh\n",
            "EasyRSA-3.2.4/x509-types/server": "extendedKeyUsage = serverAuth\n",
        })))

        script = fetch_easyrsa(tmp_path, "https://example.invalid/EasyRSA.tgz", timeout=5)

        assert script == tmp_path / "easyrsa"
        assert (tmp_path / "x509-types" / "server").is_file()
        assert not (tmp_path / "EasyRSA-3.2.4").exists()
        assert os.access(script, os.X_OK)
        assert requested == [("https://example.invalid/EasyRSA.tgz", 5)]

    def test_archive_without_easyrsa(self, serve, tmp_path):
        serve(FakeResponse(_tarball({"EasyRSA-3.2.4/README.md": "hello"})))

        with pytest.raises(PreconditionError, match="easyrsa not found"):
            fetch_easyrsa(tmp_path, "https://example.invalid/EasyRSA.tgz")

    def test_http_error(self, serve, tmp_path):
        serve(FakeResponse(status_code=404))

        with pytest.raises(PreconditionError, match="Failed to download"):
            fetch_easyrsa(tmp_path, "https://example.invalid/EasyRSA.tgz")

    def test_network_error(self, serve, tmp_path):
        serve(requests.ConnectionError("unreachable"))

        with pytest.raises(PreconditionError, match="internet connection"):
            fetch_easyrsa(tmp_path, "https://example.invalid/EasyRSA.tgz")

    def test_corrupt_archive(self, serve, tmp_path):
        serve(FakeResponse(b"not a tarball"))

        with pytest.raises(PreconditionError, match="Failed to extract"):
            fetch_easyrsa(tmp_path, "https://example.invalid/EasyRSA.tgz")

    def test_refuses_path_traversal(self, serve, tmp_path):
        target = tmp_path / "store"
        serve(FakeResponse(_tarball({"EasyRSA-3.2.4/../../evil": "x"})))

        with pytest.raises(PreconditionError):
            fetch_easyrsa(target, "https://example.invalid/EasyRSA.tgz")
        assert not (tmp_path.parent / "evil").exists()


@pytest.mark.unit
class TestEnsureExecutable:
    def test_marks_script_executable(self, tmp_path):
        script = tmp_path / "easyrsa"
        script.write_text("#!/bin/sh\n")
        script.chmod(0o644)

        ensure_executable(script)

        assert os.access(script, os.X_OK)

    def test_missing_script(self, tmp_path):
        with pytest.raises(PreconditionError):
            ensure_executable(tmp_path / "easyrsa")
