"""Transactional workflows deploying the voting contract and its scripts."""

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, Sequence

from .constants import GAS_LIMIT
from .exceptions import GatewayError
from .gateway import LedgerGateway
from .templates import (
    RenderedSource,
    render_allocate_script,
    render_close_script,
    render_contract,
    render_initial_state,
    render_vote_script,
)
from .types import (
    ContractState,
    TxResult,
    UnsignedTxBundle,
    VotingSetup,
    WalletAddress,
    WorkflowStep,
)

logger = logging.getLogger(__name__)

StepCallback = Callable[[WorkflowStep], None]


def explorer_transaction_url(explorer_url: str, tx_id: str) -> str:
    """
    Get the block explorer page of a transaction.

    Args:
        explorer_url: Explorer base URL (e.g. https://testnet.alephium.org)
        tx_id: Transaction id

    Returns:
        URL of the transaction page
    """
    return f"{explorer_url.rstrip('/')}/#/transactions/{tx_id}"


class VotingWorkflows:
    """
    Composes gateway calls into the voting contract's workflows.

    Each workflow runs its steps strictly in order
    (unlock, fetch prerequisite, render, compile, build, sign, submit).
    The first failing step aborts the workflow: the gateway error propagates
    with its ``step`` attribute set. Nothing is retried or rolled back.
    """

    def __init__(
        self,
        gateway: LedgerGateway,
        wallet_name: str,
        wallet_password: str,
        gas_limit: int = GAS_LIMIT,
        on_step: Optional[StepCallback] = None,
    ):
        """
        Initialize the workflows.

        Args:
            gateway: Ledger gateway to run remote calls against
            wallet_name: Name of the wallet holding spending authority
            wallet_password: Password unlocking that wallet
            gas_limit: Gas budget for deployments and scripts
            on_step: Called with every step the workflow enters
        """
        self.gateway = gateway
        self.wallet_name = wallet_name
        self._wallet_password = wallet_password
        self.gas_limit = gas_limit
        self.on_step = on_step

    def _enter(self, step: WorkflowStep) -> None:
        logger.info("Workflow step: %s", step.value)
        if self.on_step is not None:
            self.on_step(step)

    @contextmanager
    def _step(self, step: WorkflowStep) -> Iterator[None]:
        self._enter(step)
        try:
            yield
        except Exception as e:
            if isinstance(e, GatewayError) and e.step is None:
                e.step = step
            logger.error("Workflow failed while %s: %s", step.value, e)
            self._enter(WorkflowStep.FAILED)
            raise

    def unlock(self) -> None:
        """Unlock the configured wallet."""
        with self._step(WorkflowStep.UNLOCKING):
            self.gateway.unlock_wallet(self.wallet_name, self._wallet_password)

    def resolve_signer(self) -> WalletAddress:
        """Get the active address of the configured wallet with its public key."""
        with self._step(WorkflowStep.FETCHING_PREREQUISITE):
            address = self.gateway.get_active_address(self.wallet_name)
            return self.gateway.get_wallet_address(self.wallet_name, address)

    def _sign_and_submit(self, unsigned: UnsignedTxBundle) -> TxResult:
        with self._step(WorkflowStep.SIGNING):
            signature = self.gateway.sign(unsigned.hash)
        with self._step(WorkflowStep.SUBMITTING):
            result = self.gateway.submit(unsigned.unsigned_tx, signature)
        self._enter(WorkflowStep.DONE)
        return result

    def deploy_contract(self, setup: VotingSetup) -> TxResult:
        """
        Deploy a new voting contract signed by the wallet's active address.

        Args:
            setup: Title and voters of the voting

        Returns:
            TxResult of the deployment; its tx_id identifies the voting from now on

        Raises:
            GatewayError: Subclass matching the failed step
        """
        self.unlock()
        return self._deploy(setup, self.resolve_signer())

    def deploy_voting(self, title: str, voters: Optional[Sequence[str]] = None) -> TxResult:
        """
        Deploy a new voting administered by the wallet's active address.

        Args:
            title: Title of the voting
            voters: Voter addresses (defaults to the administrator alone)

        Returns:
            TxResult of the deployment

        Raises:
            InvalidSetupError: If a voter address is empty
            GatewayError: Subclass matching the failed step
        """
        self.unlock()
        signer = self.resolve_signer()
        setup = VotingSetup(
            title=title, administrator=signer.address, voters=voters or [signer.address]
        )
        return self._deploy(setup, signer)

    def _deploy(self, setup: VotingSetup, signer: WalletAddress) -> TxResult:
        with self._step(WorkflowStep.RENDERING):
            if setup.administrator != signer.address:
                logger.warning(
                    "Deploying from %s for administrator %s; only the administrator can allocate and close",
                    signer.address,
                    setup.administrator,
                )
            contract = render_contract(setup.voter_count)
            initial_state = render_initial_state(setup.title, setup.administrator, setup.voters)

        with self._step(WorkflowStep.COMPILING):
            artifact = self.gateway.compile_contract(contract.text)
        with self._step(WorkflowStep.BUILDING):
            unsigned = self.gateway.build_contract(
                artifact,
                self.gas_limit,
                initial_state,
                setup.voter_count,
                signer.public_key,
            )
        result = self._sign_and_submit(unsigned)
        logger.info("Deployed voting contract %r in transaction %s", setup.title, result.tx_id)
        return result

    def deploy_script(self, script: RenderedSource, from_public_key: str) -> TxResult:
        """
        Compile, build, sign and submit a rendered script.

        The wallet must already be unlocked when the script spends assets.

        Args:
            script: Rendered script source
            from_public_key: Public key of the signing address

        Returns:
            TxResult of the script execution

        Raises:
            GatewayError: Subclass matching the failed step
        """
        with self._step(WorkflowStep.COMPILING):
            artifact = self.gateway.compile_script(script.text)
        with self._step(WorkflowStep.BUILDING):
            unsigned = self.gateway.build_script(artifact, from_public_key, self.gas_limit)
        return self._sign_and_submit(unsigned)

    def _run_script(
        self,
        deployment_tx_id: str,
        render: Callable[..., RenderedSource],
        *args,
    ) -> TxResult:
        self.unlock()
        signer = self.resolve_signer()
        with self._step(WorkflowStep.FETCHING_PREREQUISITE):
            ref = self.gateway.get_contract_ref(deployment_tx_id)
            voter_count = self.gateway.fetch_contract_state(ref).voter_count
        with self._step(WorkflowStep.RENDERING):
            script = render(*args, ref, voter_count)
        return self.deploy_script(script, signer.public_key)

    def allocate_tokens(self, deployment_tx_id: str) -> TxResult:
        """Hand out one voting token to every voter. Administrator only."""
        return self._run_script(deployment_tx_id, render_allocate_script)

    def vote(self, deployment_tx_id: str, choice: bool) -> TxResult:
        """Cast a vote with the wallet's voting token."""
        return self._run_script(deployment_tx_id, render_vote_script, choice)

    def close(self, deployment_tx_id: str) -> TxResult:
        """Close the voting. Administrator only."""
        return self._run_script(deployment_tx_id, render_close_script)

    def show_state(self, deployment_tx_id: str) -> ContractState:
        """Fetch the current state of a voting. Never cached."""
        return self.gateway.get_contract_state(deployment_tx_id)
