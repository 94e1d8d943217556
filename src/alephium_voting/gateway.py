"""Ledger gateway: typed access to the Alephium full node REST API."""

import abc
import logging
from typing import Any, Dict, Optional, Type

import requests

from .constants import DEFAULT_REQUEST_TIMEOUT, NETWORK_IDS
from .exceptions import (
    BuildError,
    CompilationError,
    GatewayError,
    NetworkError,
    NotAContractDeploymentError,
    StateDecodingError,
    SubmissionError,
    WalletError,
)
from .state import decode_contract_state
from .types import (
    CompiledArtifact,
    ContractReference,
    ContractState,
    NetworkType,
    TxResult,
    UnsignedTxBundle,
    WalletAddress,
)

logger = logging.getLogger(__name__)


class LedgerGateway(abc.ABC):
    """
    Remote capabilities of a full node used by the voting workflows.

    Every method performs one or more network calls and raises a GatewayError
    subclass on failure. None of them mutate local state. Only submit() is not
    safe to retry.
    """

    @abc.abstractmethod
    def unlock_wallet(self, name: str, password: str) -> None:
        """Unlock a server-side wallet."""

    @abc.abstractmethod
    def get_active_address(self, wallet_name: str) -> str:
        """Get the wallet's active address."""

    @abc.abstractmethod
    def get_wallet_address(self, wallet_name: str, address: str) -> WalletAddress:
        """Get public key and group of one of the wallet's addresses."""

    @abc.abstractmethod
    def sign(self, payload_hash: str) -> str:
        """Sign a hash with the active address key."""

    @abc.abstractmethod
    def compile_contract(self, source_text: str) -> CompiledArtifact:
        """Compile contract source text."""

    @abc.abstractmethod
    def compile_script(self, source_text: str) -> CompiledArtifact:
        """Compile script source text."""

    @abc.abstractmethod
    def build_contract(
        self,
        artifact: CompiledArtifact,
        gas_limit: int,
        initial_state: str,
        issued_token_amount: int,
        from_public_key: str,
    ) -> UnsignedTxBundle:
        """Build an unsigned contract deployment transaction."""

    @abc.abstractmethod
    def build_script(
        self,
        artifact: CompiledArtifact,
        from_public_key: str,
        gas_limit: Optional[int] = None,
    ) -> UnsignedTxBundle:
        """Build an unsigned script execution transaction."""

    @abc.abstractmethod
    def submit(self, unsigned_tx: str, signature: str) -> TxResult:
        """Submit a signed transaction. Not idempotent."""

    @abc.abstractmethod
    def get_contract_ref(self, deployment_tx_id: str) -> ContractReference:
        """Resolve a deployment transaction id to its contract reference."""

    @abc.abstractmethod
    def fetch_contract_state(self, ref: ContractReference) -> ContractState:
        """Fetch the current state of a resolved contract."""

    def get_contract_state(self, deployment_tx_id: str) -> ContractState:
        """Fetch the current state of the contract created by a deployment."""
        return self.fetch_contract_state(self.get_contract_ref(deployment_tx_id))

    @abc.abstractmethod
    def get_network_type(self) -> NetworkType:
        """Classify the network the node belongs to."""


class NodeGateway(LedgerGateway):
    """LedgerGateway backed by the full node's REST API."""

    def __init__(
        self,
        node_host: str,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the gateway.

        Args:
            node_host: Base URL of the node (e.g. http://localhost:12973)
            timeout: Seconds before a request is abandoned
            session: Session to reuse (a new one is created if None)
        """
        self.node_host = node_host.rstrip("/")
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()

    def _request(
        self,
        method: str,
        path: str,
        error_class: Type[GatewayError],
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.node_host}{path}"
        logger.debug("%s %s", method, url)
        try:
            response = self.session.request(
                method, url, json=json, params=params, timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.warning("Node unreachable at %s: %s", url, e)
            raise NetworkError(f"Network error calling {path}: {e}") from e

        if response.status_code >= 400:
            detail = _error_detail(response)
            logger.warning(
                "%s %s failed with status %s: %s",
                method,
                path,
                response.status_code,
                detail or response.reason,
            )
            raise error_class(
                f"Request to {path} failed with status {response.status_code}",
                detail=detail,
                status_code=response.status_code,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise error_class(f"Malformed JSON response from {path}") from e

    def unlock_wallet(self, name: str, password: str) -> None:
        self._request(
            "POST", f"/wallets/unlock/{name}", WalletError, json={"password": password}
        )
        logger.info("Unlocked wallet %s", name)

    def get_active_address(self, wallet_name: str) -> str:
        result = self._request("GET", f"/wallets/addresses/{wallet_name}", WalletError)
        try:
            return result["activeAddress"]
        except (KeyError, TypeError) as e:
            raise WalletError(f"No active address reported for wallet {wallet_name}") from e

    def get_wallet_address(self, wallet_name: str, address: str) -> WalletAddress:
        result = self._request(
            "GET", f"/wallets/addresses/{wallet_name}/{address}", WalletError
        )
        try:
            return WalletAddress(
                address=result["address"],
                public_key=result["publicKey"],
                group=result.get("group"),
            )
        except (KeyError, TypeError) as e:
            raise WalletError(f"Incomplete address info for {address}") from e

    def sign(self, payload_hash: str) -> str:
        result = self._request("POST", "/wallets/sign", WalletError, json={"data": payload_hash})
        try:
            return result["signature"]
        except (KeyError, TypeError) as e:
            raise WalletError("Sign response has no signature") from e

    def _compile(self, path: str, source_text: str) -> CompiledArtifact:
        # Compiler messages are returned untouched in the error detail
        result = self._request("POST", path, CompilationError, json={"code": source_text})
        try:
            return CompiledArtifact(
                bytecode=result["bytecode"],
                code_hash=result.get("codeHash"),
                raw=result,
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise CompilationError(f"Compile response from {path} has no bytecode") from e

    def compile_contract(self, source_text: str) -> CompiledArtifact:
        return self._compile("/contracts/compile-contract", source_text)

    def compile_script(self, source_text: str) -> CompiledArtifact:
        return self._compile("/contracts/compile-script", source_text)

    def _build(self, path: str, body: Dict[str, Any]) -> UnsignedTxBundle:
        result = self._request("POST", path, BuildError, json=body)
        try:
            return UnsignedTxBundle(
                hash=result["hash"],
                unsigned_tx=result["unsignedTx"],
                contract_id=result.get("contractId"),
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise BuildError(f"Build response from {path} is incomplete") from e

    def build_contract(
        self,
        artifact: CompiledArtifact,
        gas_limit: int,
        initial_state: str,
        issued_token_amount: int,
        from_public_key: str,
    ) -> UnsignedTxBundle:
        return self._build(
            "/contracts/build-contract",
            {
                "fromPublicKey": from_public_key,
                "bytecode": artifact.bytecode,
                "gas": gas_limit,
                "initialFields": initial_state,
                "issueTokenAmount": str(issued_token_amount),
            },
        )

    def build_script(
        self,
        artifact: CompiledArtifact,
        from_public_key: str,
        gas_limit: Optional[int] = None,
    ) -> UnsignedTxBundle:
        body: Dict[str, Any] = {"fromPublicKey": from_public_key, "bytecode": artifact.bytecode}
        if gas_limit is not None:
            body["gas"] = gas_limit
        return self._build("/contracts/build-script", body)

    def submit(self, unsigned_tx: str, signature: str) -> TxResult:
        result = self._request(
            "POST",
            "/transactions/submit",
            SubmissionError,
            json={"unsignedTx": unsigned_tx, "signature": signature},
        )
        try:
            tx_result = TxResult(
                tx_id=result["txId"],
                from_group=result.get("fromGroup"),
                to_group=result.get("toGroup"),
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise SubmissionError("Submit response has no txId") from e
        logger.info("Submitted transaction %s", tx_result.tx_id)
        return tx_result

    def get_contract_ref(self, deployment_tx_id: str) -> ContractReference:
        try:
            details = self._request(
                "GET", f"/transactions/details/{deployment_tx_id}", GatewayError
            )
        except GatewayError as e:
            if e.status_code == 404:
                raise NotAContractDeploymentError(
                    f"Transaction {deployment_tx_id} not found",
                    detail=e.detail,
                    status_code=404,
                ) from e
            raise

        try:
            outputs = (details or {}).get("generatedOutputs") or []
            for output in outputs:
                if output.get("type") != "ContractOutput":
                    continue
                tokens = output.get("tokens") or []
                if not tokens:
                    break
                return ContractReference(
                    contract_address=output["address"], token_id=tokens[0]["id"]
                )
        except (KeyError, TypeError, AttributeError) as e:
            raise NotAContractDeploymentError(
                f"Malformed details for transaction {deployment_tx_id}"
            ) from e

        raise NotAContractDeploymentError(
            f"Transaction {deployment_tx_id} is not a contract deployment"
        )

    def fetch_contract_state(self, ref: ContractReference) -> ContractState:
        group_info = self._request("GET", f"/addresses/{ref.contract_address}/group", GatewayError)
        try:
            group = group_info["group"]
        except (KeyError, TypeError) as e:
            raise GatewayError(f"No group reported for {ref.contract_address}") from e

        result = self._request(
            "GET",
            f"/contracts/{ref.contract_address}/state",
            GatewayError,
            params={"group": group},
        )
        if not isinstance(result, dict):
            raise GatewayError(f"Unexpected state response for contract {ref.contract_address}")
        try:
            return decode_contract_state(result.get("fields") or [])
        except StateDecodingError as e:
            raise GatewayError(
                f"Unexpected state layout for contract {ref.contract_address}: {e}"
            ) from e

    def get_network_type(self) -> NetworkType:
        result = self._request("GET", "/infos/chain-params", GatewayError)
        if not isinstance(result, dict):
            raise GatewayError(f"Unexpected chain-params response: {result!r}")
        network_id = result.get("networkId")
        name = NETWORK_IDS.get(network_id) if isinstance(network_id, int) else None
        if name is None:
            return NetworkType.UNKNOWN
        return NetworkType(name)


def _error_detail(response: requests.Response) -> Optional[str]:
    """Extract the node's structured error detail, if any."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("detail"), str):
        return body["detail"]
    return None
