"""Data types and dataclasses for alephium-voting library."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .exceptions import InvalidSetupError


class NetworkType(Enum):
    """
    Classification of the node's network identity.

    - UNKNOWN: node answered but its network id is neither mainnet nor testnet
    - UNREACHABLE: node did not answer the last probe
    """

    MAINNET = "mainnet"
    TESTNET = "testnet"
    UNKNOWN = "unknown"
    UNREACHABLE = "unreachable"

    @property
    def label(self) -> str:
        """Human readable badge text."""
        return {
            NetworkType.MAINNET: "Mainnet",
            NetworkType.TESTNET: "Testnet",
            NetworkType.UNKNOWN: "Unknown network",
            NetworkType.UNREACHABLE: "Unreachable node",
        }[self]

    @property
    def is_safe_for_testing(self) -> bool:
        """Only testnet is safe to experiment on."""
        return self is NetworkType.TESTNET


class WorkflowStep(Enum):
    """Steps a deploy workflow goes through, in order."""

    IDLE = "idle"
    UNLOCKING = "unlocking"
    FETCHING_PREREQUISITE = "fetching-prerequisite"
    RENDERING = "rendering"
    COMPILING = "compiling"
    BUILDING = "building"
    SIGNING = "signing"
    SUBMITTING = "submitting"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class ContractReference:
    """Identifies a deployed contract instance."""

    contract_address: str  # Base58 contract address
    token_id: str  # Hex id of the issued token (equals the contract id)


@dataclass(frozen=True)
class VotingSetup:
    """Parameters of a voting to deploy."""

    title: str
    administrator: str
    voters: Tuple[str, ...]

    def __post_init__(self):
        # Accept any sequence but store a tuple
        object.__setattr__(self, "voters", tuple(self.voters))
        if not self.administrator:
            raise InvalidSetupError("Administrator address is required")
        if not self.voters:
            raise InvalidSetupError("At least one voter is required")
        if any(not voter for voter in self.voters):
            raise InvalidSetupError("Voter addresses must not be empty")

    @property
    def voter_count(self) -> int:
        return len(self.voters)


@dataclass(frozen=True)
class ContractState:
    """Snapshot of the voting contract's fields."""

    title: str
    yes_count: int
    no_count: int
    is_closed: bool
    initialized: bool
    administrator: str
    voters: Tuple[str, ...]

    @property
    def voter_count(self) -> int:
        return len(self.voters)


@dataclass(frozen=True)
class TxResult:
    """Result of a transaction submission."""

    tx_id: str
    from_group: Optional[int] = None
    to_group: Optional[int] = None


@dataclass(frozen=True)
class WalletAddress:
    """Signing identity of a wallet address."""

    address: str
    public_key: str
    group: Optional[int] = None


@dataclass
class CompiledArtifact:
    """Output of remote compilation."""

    bytecode: str
    code_hash: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)  # Full compiler response


@dataclass
class UnsignedTxBundle:
    """Unsigned transaction and the hash to sign."""

    hash: str
    unsigned_tx: str
    contract_id: Optional[str] = None  # Only set for contract deployments
