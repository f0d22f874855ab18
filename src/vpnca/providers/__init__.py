from ..config import Settings
from ..provider import PKIProvider

from .easyrsa import EasyRSAProvider


def get_provider(settings: Settings) -> PKIProvider:
    return EasyRSAProvider(settings.easyrsa_path, settings.store_root)
