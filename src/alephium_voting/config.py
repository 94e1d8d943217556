"""Runtime settings for alephium-voting library."""

import math
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .constants import (
    DEFAULT_EXPLORER_URL,
    DEFAULT_NODE_HOST,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_WALLET_NAME,
    DEFAULT_WALLET_PASSWORD,
)


@dataclass
class Settings:
    """Connection and wallet settings."""

    node_host: str = DEFAULT_NODE_HOST
    explorer_url: str = DEFAULT_EXPLORER_URL
    wallet_name: str = DEFAULT_WALLET_NAME
    wallet_password: str = DEFAULT_WALLET_PASSWORD
    poll_interval: float = DEFAULT_POLL_INTERVAL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def __repr__(self) -> str:
        # Keep the password out of logs and tracebacks
        return (
            f"Settings(node_host={self.node_host!r}, explorer_url={self.explorer_url!r}, "
            f"wallet_name={self.wallet_name!r}, poll_interval={self.poll_interval!r}, "
            f"request_timeout={self.request_timeout!r})"
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Settings with every unset variable falling back to its default

        Raises:
            ValueError: If a numeric variable cannot be parsed or is not a positive finite number
        """
        if environ is None:
            environ = os.environ

        return cls(
            node_host=environ.get("ALEPHIUM_NODE_HOST", DEFAULT_NODE_HOST).rstrip("/"),
            explorer_url=environ.get("ALEPHIUM_EXPLORER_URL", DEFAULT_EXPLORER_URL).rstrip("/"),
            wallet_name=environ.get("ALEPHIUM_WALLET_NAME", DEFAULT_WALLET_NAME),
            wallet_password=environ.get("ALEPHIUM_WALLET_PASSWORD", DEFAULT_WALLET_PASSWORD),
            poll_interval=_positive_float(
                environ, "ALEPHIUM_POLL_INTERVAL", DEFAULT_POLL_INTERVAL
            ),
            request_timeout=_positive_float(
                environ, "ALEPHIUM_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT
            ),
        )


def _positive_float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e
    if not math.isfinite(value) or value <= 0:
        raise ValueError(f"{name} must be a positive finite number, got {raw!r}")
    return value
