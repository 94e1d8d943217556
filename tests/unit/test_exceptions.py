"""Unit tests for custom exception classes."""

import pytest

from alephium_voting.exceptions import (
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

GATEWAY_ERRORS = [
    GatewayError,
    WalletError,
    CompilationError,
    BuildError,
    SubmissionError,
    NetworkError,
    NotAContractDeploymentError,
]


class TestExceptionCatching:
    """Test that exceptions can be caught as their base types."""

    def test_catch_invalid_setup_as_value_error(self):
        """Test that InvalidSetupError can be caught as ValueError."""
        with pytest.raises(ValueError):
            raise InvalidSetupError("test")

    def test_catch_state_decoding_as_value_error(self):
        """Test that StateDecodingError can be caught as ValueError."""
        with pytest.raises(ValueError):
            raise StateDecodingError("test")

    def test_catch_network_error_as_connection_error(self):
        """Test that NetworkError can be caught as ConnectionError."""
        with pytest.raises(ConnectionError):
            raise NetworkError("test")

    def test_catch_not_a_contract_deployment_as_lookup_error(self):
        """Test that NotAContractDeploymentError can be caught as LookupError."""
        with pytest.raises(LookupError):
            raise NotAContractDeploymentError("test")

    @pytest.mark.parametrize("exc_class", GATEWAY_ERRORS)
    def test_catch_gateway_errors_as_gateway_error(self, exc_class):
        """Test that every remote failure can be caught as GatewayError."""
        with pytest.raises(GatewayError):
            raise exc_class("test")

    def test_catch_all_as_voting_error(self):
        """Test that all custom exceptions can be caught as VotingError."""
        exceptions = [
            InvalidSetupError("test"),
            StateDecodingError("test"),
            ContractAssertionError("test"),
        ] + [exc_class("test") for exc_class in GATEWAY_ERRORS]

        for exc in exceptions:
            with pytest.raises(VotingError):
                raise exc


class TestGatewayErrorDetail:
    """Test how gateway errors carry the node's detail message."""

    def test_message_used_without_detail(self):
        """Test that str() falls back to the generic message."""
        exc = SubmissionError("Request to /transactions/submit failed with status 500")

        assert str(exc) == "Request to /transactions/submit failed with status 500"
        assert exc.detail is None
        assert exc.status_code is None
        assert exc.step is None

    def test_detail_takes_precedence(self):
        """Test that the remote detail is the error's text when present."""
        exc = CompilationError(
            "Request to /contracts/compile-contract failed with status 400",
            detail="Invalid contract: expected ')'",
            status_code=400,
        )

        assert str(exc) == "Invalid contract: expected ')'"
        assert exc.detail == "Invalid contract: expected ')'"
        assert exc.status_code == 400


class TestUserMessage:
    """Test the user_message function."""

    def test_returns_detail_when_structured(self):
        exc = WalletError("failed", detail="Wrong password", status_code=401)
        assert user_message(exc) == "Wrong password"

    def test_returns_string_otherwise(self):
        assert user_message(ValueError("boom")) == "boom"

    def test_empty_detail_falls_back_to_message(self):
        exc = BuildError("Request to /contracts/build-contract failed", detail="")
        assert user_message(exc) == "Request to /contracts/build-contract failed"
