import logging
from argparse import _SubParsersAction, Namespace
from pathlib import Path
from typing import Callable

from ..config import Settings
from ..crypto import PKIStore
from ..fetch import ensure_executable, fetch_easyrsa
from ..host import PreconditionError, require_posix_host, require_superuser
from ..orchestrator import LifecycleOrchestrator, run_pipeline
from ..permissions import apply_permission_policy
from ..prompts import (
    DEFAULT_CA_NAME, DEFAULT_SERVER_NAME, Ask, client_name_prompter, prompt_client_count, prompt_name,
)
from ..provider import PKIProvider
from ..store import StoreDB
from ..subcommand import Subcommand
from ..summary import format_summary


logger = logging.getLogger(__name__)


class NewPKISubcommand(Subcommand):
    def __init__(self, provider_factory: Callable[[Settings], PKIProvider], ask: Ask = input):
        self._provider_factory = provider_factory
        self._ask = ask

    def augment_subcommands(self, subparsers: _SubParsersAction):
        subcmd = subparsers.add_parser("setup", help="Interactively create a CA, server and client certificates")
        subcmd.set_defaults(func=self.run)

        subcmd.add_argument("--easyrsa", type=Path, help="Use an existing easyrsa script instead of downloading one")
        subcmd.add_argument("--easyrsa-url", type=str, help="Release tarball to download easy-rsa from")
        subcmd.add_argument("--encrypt-keys", action="store_true",
                            help="Protect private keys with a passphrase (default: keys are written unencrypted)")
        subcmd.add_argument("--no-root-check", action="store_true", help="Do not require superuser privileges")

    def run(self, ns: Namespace, settings: Settings) -> int:
        try:
            self._check_host(settings)
            self._prepare_tool(settings)
        except PreconditionError as e:
            logger.error("%s", e)
            print(f"Error: {e}")
            return 1

        db = StoreDB(settings.store_root)
        orchestrator = LifecycleOrchestrator(
            self._provider_factory(settings),
            PKIStore(root=settings.store_root),
            db,
            encrypt_keys=settings.encrypt_keys,
        )
        days = settings.validity_days

        result = run_pipeline([
            ("init-pki", lambda: self._announce("Initializing PKI...", orchestrator.initialize_pki)),
            ("build-ca", lambda: orchestrator.build_ca(self._ask_ca_name())),
            ("build-server-full", lambda: orchestrator.issue_server_certificate(self._ask_server_name(), days)),
            ("build-client-full", lambda: orchestrator.issue_client_certificates(
                self._ask_client_count(), client_name_prompter(self._ask), days)),
            ("gen-crl", lambda: self._announce("Generating Certificate Revocation List...",
                                               lambda: orchestrator.generate_crl(days))),
            ("gen-dh", lambda: self._announce("Generating DH parameters (this may take a while)...",
                                              orchestrator.generate_dh_parameters)),
            ("gen-tls-crypt-key", lambda: self._announce("Generating TLS-Crypt key...",
                                                         orchestrator.generate_tunnel_key)),
        ])

        if not result.ok:
            print(f"Error: {result.stage} failed: {result.reason}")
            return 1

        apply_permission_policy(orchestrator.layout.pki_dir)
        print(format_summary(orchestrator.store, orchestrator.layout))
        return 0

    def _check_host(self, settings: Settings):
        require_posix_host()
        if settings.root_check:
            require_superuser()

    def _prepare_tool(self, settings: Settings):
        if settings.easyrsa:
            ensure_executable(settings.easyrsa)
        else:
            print("Downloading easy-rsa...")
            fetch_easyrsa(settings.store_root, settings.easyrsa_url, settings.download_timeout)

    def _announce(self, message, stage):
        print(message)
        return stage()

    def _ask_ca_name(self) -> str:
        print("")
        print("=== Certificate Authority Setup ===")
        return prompt_name(self._ask, "Enter CA Common Name", DEFAULT_CA_NAME)

    def _ask_server_name(self) -> str:
        print("")
        print("=== Server Certificate ===")
        return prompt_name(self._ask, "Enter server name", DEFAULT_SERVER_NAME)

    def _ask_client_count(self) -> int:
        print("")
        print("=== Client Certificates ===")
        return prompt_client_count(self._ask)
