import logging
from argparse import _SubParsersAction, Namespace
from pathlib import Path
from typing import Callable

from ..config import Settings
from ..fetch import ensure_executable
from ..host import PreconditionError, require_superuser
from ..orchestrator import LifecycleOrchestrator
from ..permissions import apply_permission_policy
from ..provider import PKIProvider
from ..store import StoreDB
from ..subcommand import Subcommand


logger = logging.getLogger(__name__)


class RevokeSubcommand(Subcommand):
    def __init__(self, provider_factory: Callable[[Settings], PKIProvider]):
        self._provider_factory = provider_factory

    def augment_subcommands(self, subparsers: _SubParsersAction):
        subcmd = subparsers.add_parser("revoke", help="Revoke a certificate and regenerate the CRL")
        subcmd.set_defaults(func=self.run)

        subcmd.add_argument("name", type=str, help="Name of the server or client certificate to revoke")
        subcmd.add_argument("--easyrsa", type=Path, help="easyrsa script to use (default: the one in the store root)")
        subcmd.add_argument("--no-root-check", action="store_true", help="Do not require superuser privileges")

    def run(self, ns: Namespace, settings: Settings) -> int:
        db = StoreDB(settings.store_root)
        if not db.exists():
            print(f"Error: No PKI store found at {settings.store_root}.")
            return 1

        try:
            if settings.root_check:
                require_superuser()
            ensure_executable(settings.easyrsa_path)
        except PreconditionError as e:
            logger.error("%s", e)
            print(f"Error: {e}")
            return 1

        try:
            store = db.load()
        except ValueError as e:
            logger.error("%s", e)
            print(f"Error: Cannot read store record {db.path}: {e}")
            return 1

        orchestrator = LifecycleOrchestrator(self._provider_factory(settings), store, db)
        result = orchestrator.revoke(ns.name)
        if not result.ok:
            print(f"Error: {result.reason}")
            return 1

        apply_permission_policy(orchestrator.layout.pki_dir)
        print(f"Certificate '{ns.name}' revoked.")
        print(f"  CRL: {orchestrator.layout.crl}")
        print("Copy the new CRL to your VPN server for the revocation to take effect.")
        return 0
