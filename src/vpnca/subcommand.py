import argparse

from .config import Settings


class Subcommand:
    def augment_subcommands(self, subparsers: argparse._SubParsersAction):
        pass

    def run(self, ns: argparse.Namespace, settings: Settings) -> int:
        pass
