"""
Command line tool to inspect serialized transactions.
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, Optional, Sequence, Text, TextIO, Union

from . import __version__
from .chains import CHAINS, HARDFORKS, ChainContext
from .exceptions import EthereumException, InvalidSignatureError
from .transactions import Transaction
from .utils.hexadecimal import bytes_to_hex

DESCRIPTION = """
Inspect Ethereum legacy transactions.

Subcommands:
    1. inspect: decode a serialized transaction and report its hashes,
       sender and validity.
    2. chains: list the built-in chains and their hardforks.


The following hardforks are supported:
""" + "\n".join(
    HARDFORKS
)


def get_stream_logger(name: str) -> Any:
    """
    Get a logger that writes to stderr.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.setLevel(level=logging.INFO)
        stream_handler = logging.StreamHandler()
        formatter = logging.Formatter("%(levelname)s:%(name)s:%(message)s")
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)

    return logger


def parse_chain(value: str) -> Union[str, int]:
    """Read a chain from its name or numeric id"""
    if value.isdigit():
        return int(value)
    return value


def create_parser() -> argparse.ArgumentParser:
    """
    Create a command-line argument parser for the transaction tool.
    """
    new_parser = argparse.ArgumentParser(
        prog="ethereum-tx",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    new_parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Show the version of the tool.",
    )

    subparsers = new_parser.add_subparsers(dest="command")

    inspect_parser = subparsers.add_parser(
        "inspect", help="Decode and check a serialized transaction."
    )
    inspect_parser.add_argument(
        "transaction", type=str, help="0x prefixed RLP of the transaction."
    )
    inspect_parser.add_argument(
        "--chain",
        dest="chain",
        type=parse_chain,
        default=None,
        help="Chain name or id. Without it the chain id is read from v.",
    )
    inspect_parser.add_argument(
        "--hardfork", dest="hardfork", type=str, default=None
    )
    inspect_parser.add_argument(
        "--verbose", dest="verbose", action="store_true", default=False
    )

    subparsers.add_parser("chains", help="List the built-in chains.")

    return new_parser


def inspect_transaction(tx: Transaction) -> Dict[str, Any]:
    """
    Describe a transaction as a JSON serializable dict.
    """
    try:
        sender: Optional[str] = bytes_to_hex(tx.get_sender_address())
    except InvalidSignatureError:
        sender = None

    errors = tx.validate(True)
    return {
        "fields": tx.to_json(labels=True),
        "hash": bytes_to_hex(tx.hash()),
        "signingHash": bytes_to_hex(tx.hash(False)),
        "chainId": tx.get_chain_id(),
        "hardfork": tx.common.hardfork,
        "sender": sender,
        "upfrontCost": str(tx.get_upfront_cost()),
        "baseFee": str(tx.get_base_fee()),
        "valid": errors == "",
        "errors": errors,
    }


def list_chains() -> Dict[str, Any]:
    """
    Describe the built-in chains.
    """
    return {
        definition.name: {
            "chainId": definition.chain_id,
            "hardforks": ChainContext(definition).active_hardforks(),
        }
        for definition in CHAINS
    }


def main(
    args: Optional[Sequence[Text]] = None,
    out_file: Optional[TextIO] = None,
) -> int:
    """Run the tool based on the given options."""
    parser = create_parser()
    options = parser.parse_args(args)

    if out_file is None:
        out_file = sys.stdout

    logger = get_stream_logger("ethereum_tx")

    if options.command == "inspect":
        if options.verbose:
            logger.setLevel(logging.DEBUG)
        try:
            tx = Transaction(
                options.transaction,
                chain=options.chain,
                hardfork=options.hardfork,
            )
        except EthereumException as e:
            logger.error("cannot decode transaction: %s", e)
            return 1
        json.dump(inspect_transaction(tx), out_file, indent=4)
        out_file.write("\n")
        return 0
    elif options.command == "chains":
        json.dump(list_chains(), out_file, indent=4)
        out_file.write("\n")
        return 0
    else:
        parser.print_help(file=out_file)
        return 0
