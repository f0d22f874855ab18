import logging
from pathlib import Path
from subprocess import run, CalledProcessError
from typing import List

from ..crypto import CertRole
from ..provider import PKIProvider, ProviderError

logger = logging.getLogger(__name__)


class EasyRSAProvider(PKIProvider):
    """
    Drives the ``easyrsa`` script. Every call runs with the store root as
    the working directory, so the script creates and uses ``./pki``.
    Output goes straight to the operator's terminal.
    """

    def __init__(self, easyrsa_path: Path, store_root: Path):
        self._easyrsa = easyrsa_path
        self._cwd = store_root

    def init_pki(self):
        self._run(["init-pki"])

    def build_ca(self, common_name: str, nopass: bool = True):
        self._run([f"--req-cn={common_name}", "build-ca"] + self._nopass(nopass))

    def build_leaf(self, name: str, role: CertRole, validity_days: int, nopass: bool = True):
        subcommand = "build-server-full" if role == CertRole.SERVER else "build-client-full"
        self._run([f"--days={validity_days}", subcommand, name] + self._nopass(nopass))

    def revoke(self, name: str):
        self._run(["revoke", name])

    def gen_crl(self, validity_days: int):
        self._run([f"--days={validity_days}", "gen-crl"])

    def gen_dh(self):
        self._run(["gen-dh"])

    def gen_tunnel_key(self):
        self._run(["gen-tls-crypt-key"])

    def _nopass(self, nopass: bool) -> List[str]:
        return ["nopass"] if nopass else []

    def _run(self, args: List[str]):
        easyrsa_cmd = [str(self._easyrsa), "--batch"] + args
        logger.debug("Running %s in %s", easyrsa_cmd, self._cwd)

        try:
            run(easyrsa_cmd, cwd=self._cwd, check=True)
        except CalledProcessError as e:
            raise ProviderError(f"easyrsa {' '.join(args)} failed with exit code {e.returncode}")
        except OSError as e:
            raise ProviderError(f"Failed to run {self._easyrsa}: {e}")
