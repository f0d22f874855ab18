from argparse import _SubParsersAction, Namespace

from ..config import Settings
from ..store import StoreDB
from ..subcommand import Subcommand


class ListSubcommand(Subcommand):
    def augment_subcommands(self, subparsers: _SubParsersAction):
        subcmd = subparsers.add_parser("ls", help="List the CA and certificates in the store")
        subcmd.set_defaults(func=self.run)

    def run(self, ns: Namespace, settings: Settings) -> int:
        db = StoreDB(settings.store_root)
        if not db.exists():
            print(f"No PKI store found at {settings.store_root}.")
            return 1

        try:
            store = db.load()
        except ValueError as e:
            print(f"Error: Cannot read store record {db.path}: {e}")
            return 1

        print(f"PKI store at {store.root}:")

        if store.ca is None:
            print("    (no CA)")
            return 0

        print(f"    CA: {store.ca.common_name}")
        for leaf in store.leaves:
            status = " (revoked)" if leaf.revoked else ""
            print(f"    {leaf.role.value}: {leaf.name}{status}")
        if not store.leaves:
            print("    (no certificates)")

        return 0
