"""Shared pytest fixtures for alephium-voting tests."""

import hashlib
import json
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pytest

from alephium_voting.exceptions import (
    ContractAssertionError,
    NotAContractDeploymentError,
    SubmissionError,
)
from alephium_voting.gateway import LedgerGateway
from alephium_voting.state import (
    apply_allocate,
    apply_close,
    apply_vote,
    initial_contract_state,
    parse_initial_state,
)
from alephium_voting.types import (
    CompiledArtifact,
    ContractReference,
    ContractState,
    NetworkType,
    TxResult,
    UnsignedTxBundle,
    WalletAddress,
)

ADMIN = "1DrDyTr9RpRsQnDnXo2YRiPzPW4ooHX5LLoqXrqfMrpQH"
VOTER = "1BHSQ8hJTzjSZwB4Y2CRWrCxQwSgHmQvCs8bnYe4hBzuU"
ADMIN_PUBLIC_KEY = "02" + "ab" * 32
VOTER_PUBLIC_KEY = "03" + "cd" * 32
CONTRACT_ADDRESS = "vXSztJ9UMRmvTvMEH8fpfHrtQzcQ8VdXbgV4JSpbJSP2"
TOKEN_ID = "1f34b7c6d1e4b8fa0c7d58d6f2a9b1b2c3d4e5f60718293a4b5c6d7e8f901234"
DEPLOYMENT_TX_ID = "9b0e2c7f4d5a6b3c2d1e0f9a8b7c6d5e4f3a2b1c0d9e8f7a6b5c4d3e2f1a0b9c"


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def deployment_tx_details(fixtures_dir: Path) -> Dict[str, Any]:
    """Load the details of a contract deployment transaction."""
    with open(fixtures_dir / "deployment_tx_details.json") as f:
        return json.load(f)


@pytest.fixture
def transfer_tx_details(fixtures_dir: Path) -> Dict[str, Any]:
    """Load the details of a plain transfer transaction."""
    with open(fixtures_dir / "transfer_tx_details.json") as f:
        return json.load(f)


@pytest.fixture
def contract_state_response(fixtures_dir: Path) -> Dict[str, Any]:
    """Load a contract state response with one voter."""
    with open(fixtures_dir / "contract_state.json") as f:
        return json.load(f)


class FakeGateway(LedgerGateway):
    """
    In-memory ledger running the voting contract's state model.

    Records every call as (method name, args) in ``calls``.
    Methods listed in ``failures`` raise the mapped exception instead.
    """

    def __init__(self, wallets: Optional[Dict[str, Tuple[str, str, str]]] = None):
        # wallet name -> (password, address, public key)
        self.wallets = wallets or {
            "wallet-1": ("my-secret-password", ADMIN, ADMIN_PUBLIC_KEY),
            "wallet-2": ("my-secret-password", VOTER, VOTER_PUBLIC_KEY),
        }
        self.calls: List[Tuple[str, tuple]] = []
        self.failures: Dict[str, Exception] = {}
        self.network_type = NetworkType.TESTNET
        self.deployments: Dict[str, Tuple[ContractReference, ContractState]] = {}
        self._active_wallet: Optional[str] = None
        self._pending: Dict[str, Dict[str, Any]] = {}
        self._counter = 0

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, args))
        if name in self.failures:
            raise self.failures[name]

    @property
    def call_names(self) -> List[str]:
        return [name for name, _ in self.calls]

    def _next_id(self, prefix: str) -> str:
        self._counter += 1
        return hashlib.sha256(f"{prefix}-{self._counter}".encode()).hexdigest()

    def _signer(self) -> str:
        return self.wallets[self._active_wallet][1]

    def unlock_wallet(self, name, password):
        self._record("unlock_wallet", name, password)
        self._active_wallet = name

    def get_active_address(self, wallet_name):
        self._record("get_active_address", wallet_name)
        return self.wallets[wallet_name][1]

    def get_wallet_address(self, wallet_name, address):
        self._record("get_wallet_address", wallet_name, address)
        _, wallet_address, public_key = self.wallets[wallet_name]
        return WalletAddress(address=wallet_address, public_key=public_key, group=0)

    def sign(self, payload_hash):
        self._record("sign", payload_hash)
        return "sig-" + payload_hash

    def compile_contract(self, source_text):
        self._record("compile_contract", source_text)
        return CompiledArtifact(bytecode="contract:" + source_text)

    def compile_script(self, source_text):
        self._record("compile_script", source_text)
        return CompiledArtifact(bytecode="script:" + source_text)

    def build_contract(self, artifact, gas_limit, initial_state, issued_token_amount, from_public_key):
        self._record(
            "build_contract", artifact, gas_limit, initial_state, issued_token_amount, from_public_key
        )
        tx_hash = self._next_id("contract")
        self._pending[tx_hash] = {
            "kind": "contract",
            "state": parse_initial_state(initial_state),
            "issued": issued_token_amount,
        }
        return UnsignedTxBundle(hash=tx_hash, unsigned_tx="unsigned-" + tx_hash, contract_id=tx_hash)

    def build_script(self, artifact, from_public_key, gas_limit=None):
        self._record("build_script", artifact, from_public_key, gas_limit)
        tx_hash = self._next_id("script")
        self._pending[tx_hash] = {"kind": "script", "source": artifact.bytecode}
        return UnsignedTxBundle(hash=tx_hash, unsigned_tx="unsigned-" + tx_hash)

    def submit(self, unsigned_tx, signature):
        self._record("submit", unsigned_tx, signature)
        tx_hash = unsigned_tx[len("unsigned-"):]
        pending = self._pending.pop(tx_hash)
        if pending["kind"] == "contract":
            title, _, _, _, _, admin, voters = pending["state"]
            ref = ContractReference(contract_address="contract-" + tx_hash[:8], token_id=tx_hash)
            state = initial_contract_state(title, admin, voters)
            self.deployments[tx_hash] = (ref, state)
        else:
            try:
                self._run_script(pending["source"])
            except ContractAssertionError as e:
                raise SubmissionError(
                    "Script execution failed", detail=f"Script execution failed: {e}", status_code=400
                ) from e
        return TxResult(tx_id=tx_hash, from_group=0, to_group=0)

    def _run_script(self, source: str) -> None:
        token_id = re.search(r"Voting\(#(\w+)\)", source).group(1)
        tx_id = next(t for t, (ref, _) in self.deployments.items() if ref.token_id == token_id)
        ref, state = self.deployments[tx_id]
        caller = self._signer()
        if "TxScript TokenAllocation" in source:
            state = apply_allocate(state, caller)
        elif "TxScript VotingScript" in source:
            choice = re.search(r"voting\.vote\((true|false), caller\)", source).group(1) == "true"
            state = apply_vote(state, choice, caller)
        elif "TxScript ClosingScript" in source:
            state = apply_close(state, caller)
        self.deployments[tx_id] = (ref, state)

    def get_contract_ref(self, deployment_tx_id):
        self._record("get_contract_ref", deployment_tx_id)
        if deployment_tx_id not in self.deployments:
            raise NotAContractDeploymentError(
                f"Transaction {deployment_tx_id} is not a contract deployment"
            )
        return self.deployments[deployment_tx_id][0]

    def fetch_contract_state(self, ref):
        self._record("fetch_contract_state", ref)
        return next(state for known, state in self.deployments.values() if known == ref)

    def get_network_type(self):
        self._record("get_network_type")
        return self.network_type


@pytest.fixture
def fake_gateway() -> FakeGateway:
    """Return an empty in-memory ledger."""
    return FakeGateway()
