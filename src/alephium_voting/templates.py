"""Ralph source templates for the voting contract and its scripts."""

import hashlib
import re
from dataclasses import dataclass

from .constants import TOKENS_PER_VOTER, UTXO_FEE
from .state import render_initial_state
from .types import ContractReference

__all__ = [
    "RenderedSource",
    "render_contract",
    "render_initial_state",
    "render_allocate_script",
    "render_vote_script",
    "render_close_script",
]

_TOKEN_ID_RE = re.compile(r"^[0-9A-Za-z]+$")


@dataclass(frozen=True)
class RenderedSource:
    """Rendered source text and its SHA-256 content hash."""

    text: str
    content_hash: str

    @classmethod
    def from_text(cls, text: str) -> "RenderedSource":
        return cls(text=text, content_hash=hashlib.sha256(text.encode("utf-8")).hexdigest())

    def __str__(self) -> str:
        return self.text


def _check_voter_count(voter_count: int) -> None:
    # bool is an int subclass but never a meaningful count
    if isinstance(voter_count, bool) or not isinstance(voter_count, int):
        raise ValueError(f"Voter count must be an integer, got {voter_count!r}")
    if voter_count < 1:
        raise ValueError(f"Voter count must be at least 1, got {voter_count}")


def _check_reference(ref: ContractReference) -> str:
    if not _TOKEN_ID_RE.match(ref.token_id):
        raise ValueError(f"Token id must be a non-empty identifier, got {ref.token_id!r}")
    return ref.token_id


def _contract_text(voter_count: int) -> str:
    transfers = "\n".join(
        f"      transferAlph!(admin, voters[{i}], {UTXO_FEE})\n"
        f"      transferTokenFromSelf!(voters[{i}], selfTokenId!(), {TOKENS_PER_VOTER})"
        for i in range(voter_count)
    )
    return f"""TxContract Voting(
  mut title: ByteVec,
  mut yes: U256,
  mut no: U256,
  mut isClosed: Bool,
  mut initialized: Bool,
  admin: Address,
  voters: [Address; {voter_count}]
) {{
  event VotingStarted()
  event VoteCasted(voter: Address, result: Bool)
  event VotingClosed()

  pub payable fn allocateTokens() -> () {{
      assert!(initialized == false)
      assert!(txCaller!(txCallerSize!() - 1) == admin)
{transfers}
      yes = 0
      no = 0
      initialized = true
      isClosed = false
      emit VotingStarted()
  }}

  pub payable fn vote(choice: Bool, voter: Address) -> () {{
      assert!(initialized == true && isClosed == false)
      transferAlph!(voter, admin, {UTXO_FEE})
      transferTokenToSelf!(voter, selfTokenId!(), {TOKENS_PER_VOTER})
      emit VoteCasted(voter, choice)
      if (choice == true) {{
          yes = yes + 1
      }} else {{
          no = no + 1
      }}
  }}

  pub fn close() -> () {{
      assert!(initialized == true && isClosed == false)
      assert!(txCaller!(txCallerSize!() - 1) == admin)
      isClosed = true
      emit VotingClosed()
  }}
}}
"""


def render_contract(voter_count: int) -> RenderedSource:
    """
    Render the voting contract for a fixed number of voters.

    The allocation routine contains exactly one ALPH/token transfer pair per voter.
    Equal inputs always produce identical text.

    Args:
        voter_count: Number of voter slots (>= 1)

    Returns:
        RenderedSource of the contract definition

    Raises:
        ValueError: If voter_count is not a positive integer
    """
    _check_voter_count(voter_count)
    return RenderedSource.from_text(_contract_text(voter_count))


def _script(body: str, voter_count: int) -> RenderedSource:
    # The compiler needs the called contract's definition next to the script
    return RenderedSource.from_text(body + "\n" + _contract_text(voter_count))


def render_allocate_script(ref: ContractReference, voter_count: int) -> RenderedSource:
    """
    Render the script distributing one voting token to every voter.

    The caller approves UTXO_FEE for each voter so every voter output can be created.
    """
    _check_voter_count(voter_count)
    token_id = _check_reference(ref)
    return _script(
        f"""TxScript TokenAllocation {{
  pub payable fn main() -> () {{
    let voting = Voting(#{token_id})
    let caller = txCaller!(0)
    approveAlph!(caller, {UTXO_FEE} * {voter_count})
    voting.allocateTokens()
  }}
}}
""",
        voter_count,
    )


def render_vote_script(choice: bool, ref: ContractReference, voter_count: int) -> RenderedSource:
    """Render the script casting a vote; returns the voter's token and UTXO_FEE to the contract."""
    _check_voter_count(voter_count)
    token_id = _check_reference(ref)
    choice_literal = "true" if choice else "false"
    return _script(
        f"""TxScript VotingScript {{
  pub payable fn main() -> () {{
    let caller = txCaller!(txCallerSize!() - 1)
    approveToken!(caller, #{token_id}, {TOKENS_PER_VOTER})
    let voting = Voting(#{token_id})
    approveAlph!(caller, {UTXO_FEE})
    voting.vote({choice_literal}, caller)
  }}
}}
""",
        voter_count,
    )


def render_close_script(ref: ContractReference, voter_count: int) -> RenderedSource:
    """Render the script closing the voting. Approves no assets."""
    _check_voter_count(voter_count)
    token_id = _check_reference(ref)
    return _script(
        f"""TxScript ClosingScript {{
  pub fn main() -> () {{
    let voting = Voting(#{token_id})
    voting.close()
  }}
}}
""",
        voter_count,
    )
