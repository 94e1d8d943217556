"""Custom exception classes for alephium-voting library."""

from typing import Any, Optional


class VotingError(Exception):
    """Base exception for voting-related errors."""

    pass


class InvalidSetupError(VotingError, ValueError):
    """Raised when a voting setup cannot be deployed (e.g. no voters)."""

    pass


class StateDecodingError(VotingError, ValueError):
    """Raised when an initial-state literal or contract field list is malformed."""

    pass


class ContractAssertionError(VotingError):
    """Raised when a simulated contract call violates one of the contract's assertions."""

    pass


class GatewayError(VotingError):
    """
    Raised when a call to the full node fails.

    Attributes:
        detail: Error detail reported by the node, if the response was structured
        status_code: HTTP status code, if a response was received
        step: Workflow step that was running when the error occurred, if any
    """

    def __init__(
        self,
        message: str,
        detail: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(detail or message)
        self.detail = detail
        self.status_code = status_code
        self.step: Optional[Any] = None


class WalletError(GatewayError):
    """Raised when unlocking, address lookup or signing fails."""

    pass


class CompilationError(GatewayError):
    """Raised when the node rejects contract or script source text."""

    pass


class BuildError(GatewayError):
    """Raised when the node cannot build an unsigned transaction."""

    pass


class SubmissionError(GatewayError):
    """Raised when the ledger rejects a signed transaction."""

    pass


class NetworkError(GatewayError, ConnectionError):
    """Raised when the node is unreachable."""

    pass


class NotAContractDeploymentError(GatewayError, LookupError):
    """Raised when a transaction id does not refer to a contract deployment."""

    pass


def user_message(error: BaseException) -> str:
    """
    Get the message to show to a user for an error.

    Args:
        error: Any exception raised by a workflow

    Returns:
        The node's detail message when structured, else the stringified error
    """
    detail = getattr(error, "detail", None)
    if detail:
        return detail
    return str(error)
