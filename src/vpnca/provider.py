from .crypto import CertRole


class ProviderError(RuntimeError):
    """The external PKI tool failed or could not be run."""


class PKIProvider:
    def init_pki(self):
        raise NotImplementedError()

    def build_ca(self, common_name: str, nopass: bool = True):
        raise NotImplementedError()

    def build_leaf(self, name: str, role: CertRole, validity_days: int, nopass: bool = True):
        raise NotImplementedError()

    def revoke(self, name: str):
        raise NotImplementedError()

    def gen_crl(self, validity_days: int):
        raise NotImplementedError()

    def gen_dh(self):
        raise NotImplementedError()

    def gen_tunnel_key(self):
        raise NotImplementedError()
