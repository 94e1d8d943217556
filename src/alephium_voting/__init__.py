"""
alephium-voting: Python library deploying and driving a voting contract on an Alephium node
"""

from importlib.metadata import PackageNotFoundError, version

from .config import Settings
from .exceptions import (
    BuildError,
    CompilationError,
    ContractAssertionError,
    GatewayError,
    InvalidSetupError,
    NetworkError,
    NotAContractDeploymentError,
    StateDecodingError,
    SubmissionError,
    VotingError,
    WalletError,
    user_message,
)
from .gateway import LedgerGateway, NodeGateway
from .monitor import NetworkStatusMonitor
from .templates import RenderedSource
from .types import (
    ContractReference,
    ContractState,
    NetworkType,
    TxResult,
    VotingSetup,
    WorkflowStep,
)
from .workflows import VotingWorkflows, explorer_transaction_url

try:
    __version__ = version("alephium-voting")
except PackageNotFoundError:
    __version__ = None

__all__ = [
    "VotingWorkflows",
    "LedgerGateway",
    "NodeGateway",
    "NetworkStatusMonitor",
    "Settings",
    "RenderedSource",
    "explorer_transaction_url",
    "user_message",
    "ContractReference",
    "ContractState",
    "NetworkType",
    "TxResult",
    "VotingSetup",
    "WorkflowStep",
    "VotingError",
    "InvalidSetupError",
    "StateDecodingError",
    "ContractAssertionError",
    "GatewayError",
    "WalletError",
    "CompilationError",
    "BuildError",
    "SubmissionError",
    "NetworkError",
    "NotAContractDeploymentError",
]
