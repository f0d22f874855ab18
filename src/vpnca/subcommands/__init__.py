from argparse import ArgumentParser
from typing import Callable, List

from ..config import Settings
from ..prompts import Ask
from ..provider import PKIProvider
from ..subcommand import Subcommand

from .help import HelpSubcommand
from .new_pki import NewPKISubcommand
from .revoke import RevokeSubcommand
from .list import ListSubcommand


def build_subcommands(parser: ArgumentParser, provider_factory: Callable[[Settings], PKIProvider],
                      ask: Ask = input) -> List[Subcommand]:
    subcommands = [
        HelpSubcommand(parser),

        NewPKISubcommand(provider_factory, ask),
        RevokeSubcommand(provider_factory),

        ListSubcommand(),
    ]
    return subcommands
