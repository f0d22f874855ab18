import argparse
import logging
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from .config import DEFAULT_STORE_ROOT, Settings
from .prompts import Ask
from .provider import PKIProvider
from .providers import get_provider
from .subcommand import Subcommand
from .subcommands import build_subcommands


def get_config(subcommands: List[Subcommand], parser: argparse.ArgumentParser,
               argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug logging")
    parser.add_argument("--store-root", "-S", type=Path, default=DEFAULT_STORE_ROOT,
                        help=f"Directory holding easyrsa and the pki/ store. Default: '{DEFAULT_STORE_ROOT}'")

    subcommand_subparsers = parser.add_subparsers(title="subcommands", dest="subcommand", required=True)

    for subcommand in subcommands:
        subcommand.augment_subcommands(subcommand_subparsers)

    conf = parser.parse_args(argv)

    return conf


def init_logging(conf: argparse.Namespace):
    if conf.debug:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.INFO)


def main(argv: Optional[Sequence[str]] = None, ask: Ask = input,
         provider_factory: Callable[[Settings], PKIProvider] = get_provider) -> int:
    parser = argparse.ArgumentParser(description="Provision a CA plus server and client certificates for a VPN with easy-rsa.")

    subcommands = build_subcommands(parser, provider_factory, ask)

    conf = get_config(subcommands, parser, argv)

    init_logging(conf)

    settings = Settings.from_namespace(conf)

    subcmd_func = conf.func
    return subcmd_func(conf, settings)
