"""
Chain Configuration
^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

A transaction is only meaningful relative to the network it is sent on and
the protocol rules active on that network. [`ChainContext`] bundles the
three things a transaction needs to know about its network:

* the numeric chain id used for [EIP-155] replay protection,
* the active hardfork, and an ordering to test whether a rule has been
  switched on ("at or after" comparisons), and
* the gas parameters in force for the active hardfork.

Hardforks are intentionally created changes of the protocol rules. They are
totally ordered: every chain activates them in the same order, though not
every chain activates every one of them (only Mainnet went through the DAO
fork) and the activation blocks differ between chains.

[`ChainContext`]: ref:ethereum_tx.chains.ChainContext
[EIP-155]: https://eips.ethereum.org/EIPS/eip-155
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .exceptions import (
    ConfigurationConflictError,
    ConfigurationError,
    UnknownChainError,
    UnknownHardforkError,
)

logger = logging.getLogger(__name__)

HARDFORKS: Tuple[str, ...] = (
    "frontier",
    "homestead",
    "dao_fork",
    "tangerine_whistle",
    "spurious_dragon",
    "byzantium",
    "constantinople",
    "petersburg",
    "istanbul",
    "muir_glacier",
)
"""
Every known hardfork, earliest first.
"""

DEFAULT_CHAIN = "mainnet"
DEFAULT_HARDFORK = "byzantium"

GAS_PRICES = "gas_prices"

PARAMS: Dict[str, Dict[str, Tuple[Tuple[str, int], ...]]] = {
    GAS_PRICES: {
        "tx": (("frontier", 21000),),
        "tx_creation": (("frontier", 32000),),
        "tx_data_zero": (("frontier", 4),),
        "tx_data_non_zero": (("frontier", 68), ("istanbul", 16)),
    },
}
"""
Parameter history per topic. Each entry lists `(hardfork, value)` pairs in
hardfork order; the value in force is the one of the latest listed hardfork
that is active.
"""


def hardfork_index(name: str) -> int:
    """
    Position of `name` in the hardfork ordering.

    Raises
    ------
    UnknownHardforkError
        If `name` is not a known hardfork.
    """
    try:
        return HARDFORKS.index(name)
    except ValueError:
        raise UnknownHardforkError(f"unknown hardfork {name!r}") from None


@dataclass(frozen=True)
class ChainDefinition:
    """
    Static description of a network.
    """

    name: str
    chain_id: int
    fork_blocks: Mapping[str, Optional[int]] = field(default_factory=dict)
    """
    Activation block of each hardfork. Hardforks that are missing, or
    mapped to `None`, are never activated on this chain.
    """


CHAINS: Tuple[ChainDefinition, ...] = (
    ChainDefinition(
        name="mainnet",
        chain_id=1,
        fork_blocks={
            "frontier": 0,
            "homestead": 1150000,
            "dao_fork": 1920000,
            "tangerine_whistle": 2463000,
            "spurious_dragon": 2675000,
            "byzantium": 4370000,
            "constantinople": 7280000,
            "petersburg": 7280000,
            "istanbul": 9069000,
            "muir_glacier": 9200000,
        },
    ),
    ChainDefinition(
        name="ropsten",
        chain_id=3,
        fork_blocks={
            "frontier": 0,
            "homestead": 0,
            "tangerine_whistle": 0,
            "spurious_dragon": 10,
            "byzantium": 1700000,
            "constantinople": 4230000,
            "petersburg": 4939394,
            "istanbul": 6485846,
            "muir_glacier": 7117117,
        },
    ),
    ChainDefinition(
        name="rinkeby",
        chain_id=4,
        fork_blocks={
            "frontier": 0,
            "homestead": 1,
            "tangerine_whistle": 2,
            "spurious_dragon": 3,
            "byzantium": 1035301,
            "constantinople": 3660663,
            "petersburg": 4321234,
            "istanbul": 5435345,
        },
    ),
    ChainDefinition(
        name="goerli",
        chain_id=5,
        fork_blocks={
            "frontier": 0,
            "homestead": 0,
            "tangerine_whistle": 0,
            "spurious_dragon": 0,
            "byzantium": 0,
            "constantinople": 0,
            "petersburg": 0,
            "istanbul": 1561651,
        },
    ),
    ChainDefinition(
        name="kovan",
        chain_id=42,
        fork_blocks={
            "frontier": 0,
            "homestead": 0,
            "tangerine_whistle": 0,
            "spurious_dragon": 0,
            "byzantium": 5067000,
            "constantinople": 9200000,
            "petersburg": 10255201,
            "istanbul": 14111141,
        },
    ),
)


def get_chain_definition(chain: Union[str, int]) -> ChainDefinition:
    """
    Look up a built-in chain by name (case insensitive) or chain id.
    """
    for definition in CHAINS:
        if isinstance(chain, str):
            if definition.name == chain.casefold():
                return definition
        elif definition.chain_id == chain:
            return definition
    raise UnknownChainError(f"unknown chain {chain!r}")


GENESIS_FORK_KEYS: Tuple[Tuple[str, str], ...] = (
    ("homesteadBlock", "homestead"),
    ("daoForkBlock", "dao_fork"),
    ("eip150Block", "tangerine_whistle"),
    ("eip155Block", "spurious_dragon"),
    ("byzantiumBlock", "byzantium"),
    ("constantinopleBlock", "constantinople"),
    ("petersburgBlock", "petersburg"),
    ("istanbulBlock", "istanbul"),
    ("muirGlacierBlock", "muir_glacier"),
)


class ChainContext:
    """
    The chain and hardfork a transaction belongs to.

    The active hardfork is either named directly, derived from a block
    number, or (when neither is given) defaults to `byzantium`.
    """

    definition: ChainDefinition
    hardfork: str

    def __init__(
        self,
        chain: Union[str, int, ChainDefinition] = DEFAULT_CHAIN,
        hardfork: Optional[str] = None,
        block_number: Optional[int] = None,
    ) -> None:
        if isinstance(chain, ChainDefinition):
            self.definition = chain
        else:
            self.definition = get_chain_definition(chain)

        if hardfork is not None and block_number is not None:
            raise ConfigurationConflictError(
                "hardfork and block_number cannot both be given"
            )

        if block_number is not None:
            hardfork = self.hardfork_for_block(block_number)
        elif hardfork is None:
            hardfork = DEFAULT_HARDFORK

        hardfork_index(hardfork)
        self.hardfork = hardfork
        logger.debug(
            "using chain %s (id %d) at hardfork %s",
            self.definition.name,
            self.definition.chain_id,
            self.hardfork,
        )

    @classmethod
    def from_genesis(
        cls,
        json: Any,
        hardfork: Optional[str] = None,
        block_number: Optional[int] = None,
    ) -> "ChainContext":
        """
        Build a context for a custom chain from a geth style genesis file.

        Accepts either the whole genesis object or only its `config` member.
        """
        config = json.get("config", json)
        try:
            chain_id = int(config["chainId"])
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(
                "genesis config needs an integer chainId"
            ) from e

        fork_blocks: Dict[str, Optional[int]] = {"frontier": 0}
        for key, name in GENESIS_FORK_KEYS:
            block = config.get(key)
            fork_blocks[name] = None if block is None else int(block)

        definition = ChainDefinition(
            name=str(config.get("name", f"chain-{chain_id}")),
            chain_id=chain_id,
            fork_blocks=fork_blocks,
        )
        return cls(definition, hardfork=hardfork, block_number=block_number)

    @property
    def chain_name(self) -> str:
        """
        Name of the chain.
        """
        return self.definition.name

    def chain_id(self) -> int:
        """
        Numeric identifier of the chain, used for replay protection.
        """
        return self.definition.chain_id

    def gte_hardfork(self, name: str) -> bool:
        """
        Whether the active hardfork is `name` or a later one.
        """
        return hardfork_index(self.hardfork) >= hardfork_index(name)

    def hardfork_block(self, name: str) -> Optional[int]:
        """
        Activation block of `name` on this chain, or `None` if the chain
        never activates it.
        """
        hardfork_index(name)
        return self.definition.fork_blocks.get(name)

    def hardfork_for_block(self, block_number: int) -> str:
        """
        Latest hardfork activated at or before `block_number`.
        """
        if block_number < 0:
            raise ConfigurationError("block number cannot be negative")

        active = None
        for name in HARDFORKS:
            block = self.definition.fork_blocks.get(name)
            if block is not None and block <= block_number:
                active = name

        if active is None:
            raise ConfigurationError(
                f"no hardfork active at block {block_number} on "
                f"{self.definition.name}"
            )
        return active

    def active_hardforks(self) -> List[str]:
        """
        Hardforks scheduled on this chain, earliest first.
        """
        return [
            name
            for name in HARDFORKS
            if self.definition.fork_blocks.get(name) is not None
        ]

    def param(self, topic: str, name: str) -> int:
        """
        Value of the parameter `name` of `topic` at the active hardfork.
        """
        try:
            history = PARAMS[topic][name]
        except KeyError:
            raise ConfigurationError(
                f"unknown parameter {topic}.{name}"
            ) from None

        value = None
        for fork, fork_value in history:
            if self.gte_hardfork(fork):
                value = fork_value

        if value is None:
            raise ConfigurationError(
                f"parameter {topic}.{name} is not defined at {self.hardfork}"
            )
        return value

    def __repr__(self) -> str:
        return (
            f"ChainContext({self.definition.name!r}, "
            f"hardfork={self.hardfork!r})"
        )


def default_chain_context() -> ChainContext:
    """
    Context used by transactions that are not given any chain
    configuration: Mainnet at `byzantium`.
    """
    return ChainContext(DEFAULT_CHAIN, DEFAULT_HARDFORK)
