"""Initial-state encoding and contract state model for alephium-voting library."""

import re
from dataclasses import replace
from typing import Any, Dict, List, Sequence, Tuple

from .exceptions import ContractAssertionError, StateDecodingError
from .types import ContractState

# Fields declared before the voter array, in contract order
SCALAR_FIELD_TYPES = ("ByteVec", "U256", "U256", "Bool", "Bool", "Address")

_TOKEN_RE = re.compile(
    r"\s*(?:(?P<punct>[\[\],])|#(?P<bytes>[0-9a-fA-F]*)|@(?P<address>[1-9A-HJ-NP-Za-km-z]+)"
    r"|(?P<number>\d+)|(?P<bool>true|false))"
)

InitialState = Tuple[str, int, int, bool, bool, str, Tuple[str, ...]]


def render_initial_state(title: str, administrator: str, voters: Sequence[str]) -> str:
    """
    Render the contract's initial-state literal.

    Format: [#<hex title>, 0, 0, false, false, @<admin>, [@<voter1>, @<voter2>, ...]]

    Args:
        title: Voting title (encoded as UTF-8 bytes)
        administrator: Administrator address
        voters: Voter addresses, kept in order

    Returns:
        Initial-state literal
    """
    title_hex = title.encode("utf-8").hex()
    voters_literal = ", ".join(f"@{voter}" for voter in voters)
    return f"[#{title_hex}, 0, 0, false, false, @{administrator}, [{voters_literal}]]"


def _tokenize(text: str) -> List[Tuple[str, Any]]:
    tokens: List[Tuple[str, Any]] = []
    pos = 0
    text = text.rstrip()
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise StateDecodingError(f"Unexpected character at offset {pos}: {text[pos:pos + 10]!r}")
        pos = match.end()
        kind = match.lastgroup
        value = match.group(kind)
        if kind == "bytes":
            if len(value) % 2:
                raise StateDecodingError(f"Odd-length byte literal: #{value}")
            tokens.append(("bytes", bytes.fromhex(value)))
        elif kind == "number":
            tokens.append(("number", int(value)))
        elif kind == "bool":
            tokens.append(("bool", value == "true"))
        else:
            tokens.append((kind, value))
    return tokens


def _parse_array(tokens: List[Tuple[str, Any]], pos: int) -> Tuple[List[Any], int]:
    if pos >= len(tokens) or tokens[pos] != ("punct", "["):
        raise StateDecodingError("Expected '['")
    pos += 1
    items: List[Any] = []
    if pos < len(tokens) and tokens[pos] == ("punct", "]"):
        return items, pos + 1
    while True:
        if pos >= len(tokens):
            raise StateDecodingError("Unterminated array")
        if tokens[pos] == ("punct", "["):
            item, pos = _parse_array(tokens, pos)
            items.append(item)
        elif tokens[pos][0] == "punct":
            raise StateDecodingError(f"Unexpected {tokens[pos][1]!r}")
        else:
            items.append(tokens[pos])
            pos += 1
        if pos >= len(tokens):
            raise StateDecodingError("Unterminated array")
        if tokens[pos] == ("punct", "]"):
            return items, pos + 1
        if tokens[pos] != ("punct", ","):
            raise StateDecodingError(f"Expected ',' but got {tokens[pos][1]!r}")
        pos += 1


def _expect(item: Any, kind: str, position: int) -> Any:
    if not isinstance(item, tuple) or item[0] != kind:
        raise StateDecodingError(f"Element {position} should be of kind '{kind}'")
    return item[1]


def parse_initial_state(text: str) -> InitialState:
    """
    Parse an initial-state literal produced by render_initial_state.

    Args:
        text: Initial-state literal

    Returns:
        Tuple of (title, yes, no, is_closed, initialized, administrator, voters)

    Raises:
        StateDecodingError: If the literal is malformed
    """
    tokens = _tokenize(text)
    items, pos = _parse_array(tokens, 0)
    if pos != len(tokens):
        raise StateDecodingError("Trailing content after initial state")
    if len(items) != 7 or not isinstance(items[6], list):
        raise StateDecodingError(
            "Initial state must have 6 scalar fields followed by the voter array"
        )

    title_bytes = _expect(items[0], "bytes", 0)
    try:
        title = title_bytes.decode("utf-8")
    except UnicodeDecodeError as e:
        raise StateDecodingError("Title is not valid UTF-8") from e

    voters = tuple(_expect(voter, "address", 6) for voter in items[6])
    return (
        title,
        _expect(items[1], "number", 1),
        _expect(items[2], "number", 2),
        _expect(items[3], "bool", 3),
        _expect(items[4], "bool", 4),
        _expect(items[5], "address", 5),
        voters,
    )


def decode_contract_state(fields: Sequence[Dict[str, Any]]) -> ContractState:
    """
    Decode the node's typed field list into a ContractState.

    Args:
        fields: List of {"type": ..., "value": ...} in declaration order.
                The voter array may be flattened or nested as an "Array" field.

    Returns:
        ContractState snapshot

    Raises:
        StateDecodingError: If fields are missing or have unexpected types
    """
    flat: List[Dict[str, Any]] = []
    for f in fields:
        if f.get("type") == "Array":
            flat.extend(f.get("value", []))
        else:
            flat.append(f)

    if len(flat) < len(SCALAR_FIELD_TYPES) + 1:
        raise StateDecodingError(
            f"Expected at least {len(SCALAR_FIELD_TYPES) + 1} fields, got {len(flat)}"
        )

    expected_types = list(SCALAR_FIELD_TYPES) + ["Address"] * (len(flat) - len(SCALAR_FIELD_TYPES))
    for index, (f, expected) in enumerate(zip(flat, expected_types)):
        if f.get("type") != expected or "value" not in f:
            raise StateDecodingError(
                f"Field {index} should be {expected}, got {f.get('type')!r}"
            )

    try:
        title = bytes.fromhex(flat[0]["value"]).decode("utf-8")
        yes_count = int(flat[1]["value"])
        no_count = int(flat[2]["value"])
    except (ValueError, TypeError) as e:
        raise StateDecodingError(f"Malformed field value: {e}") from e

    return ContractState(
        title=title,
        yes_count=yes_count,
        no_count=no_count,
        is_closed=_decode_bool(flat[3]["value"]),
        initialized=_decode_bool(flat[4]["value"]),
        administrator=flat[5]["value"],
        voters=tuple(f["value"] for f in flat[len(SCALAR_FIELD_TYPES):]),
    )


def _decode_bool(value: Any) -> bool:
    # Older nodes serialize booleans as strings
    if isinstance(value, bool):
        return value
    if value in ("true", "false"):
        return value == "true"
    raise StateDecodingError(f"Malformed boolean: {value!r}")


def initial_contract_state(title: str, administrator: str, voters: Sequence[str]) -> ContractState:
    """State of a freshly deployed contract."""
    return ContractState(
        title=title,
        yes_count=0,
        no_count=0,
        is_closed=False,
        initialized=False,
        administrator=administrator,
        voters=tuple(voters),
    )


def apply_allocate(state: ContractState, caller: str) -> ContractState:
    """
    Apply allocateTokens() the way the contract does.

    Raises:
        ContractAssertionError: If already initialized or caller is not the administrator
    """
    if state.initialized:
        raise ContractAssertionError("Tokens have already been allocated")
    if caller != state.administrator:
        raise ContractAssertionError("Only the administrator can allocate tokens")
    return replace(state, yes_count=0, no_count=0, initialized=True, is_closed=False)


def apply_vote(state: ContractState, choice: bool, voter: str) -> ContractState:
    """
    Apply vote(choice, voter) the way the contract does.

    Raises:
        ContractAssertionError: If voting is not open or voter holds no voting token
    """
    _require_open(state)
    if voter not in state.voters:
        raise ContractAssertionError(f"{voter} is not a voter")
    if choice:
        return replace(state, yes_count=state.yes_count + 1)
    return replace(state, no_count=state.no_count + 1)


def apply_close(state: ContractState, caller: str) -> ContractState:
    """
    Apply close() the way the contract does.

    Raises:
        ContractAssertionError: If voting is not open or caller is not the administrator
    """
    _require_open(state)
    if caller != state.administrator:
        raise ContractAssertionError("Only the administrator can close the voting")
    return replace(state, is_closed=True)


def _require_open(state: ContractState) -> None:
    if not state.initialized:
        raise ContractAssertionError("Voting has not started")
    if state.is_closed:
        raise ContractAssertionError("Voting is closed")
