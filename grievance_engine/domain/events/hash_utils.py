"""Hash utilities for the grievance audit chain.

Every audit entry carries a reference token: the SHA-256 digest of its
canonical content, including the token of the entry before it. A grievance's
trail therefore forms a hash chain, and any edit to a stored entry breaks
every token after it.
"""

from __future__ import annotations

import hashlib
import json
import math
import unicodedata
from datetime import datetime
from typing import Any

# prev_hash of the first entry in every grievance's chain (sequence 1)
GENESIS_HASH: str = "0" * 64

# Version 1 = SHA-256
HASH_ALG_VERSION: int = 1
HASH_ALG_NAME: str = "SHA-256"


def _sanitize_for_json(data: Any) -> Any:
    """Recursively sanitize data for deterministic JSON serialization.

    Strings are NFKC-normalized and non-finite floats are rejected.

    Raises:
        ValueError: If data contains NaN, Infinity, or -Infinity values.
    """
    if isinstance(data, str):
        return unicodedata.normalize("NFKC", data)
    elif isinstance(data, float):
        if math.isnan(data) or math.isinf(data):
            raise ValueError(
                f"Cannot serialize non-finite float value: {data!r}. "
                "NaN and Infinity are not valid JSON."
            )
        return data
    elif isinstance(data, dict):
        return {_sanitize_for_json(k): _sanitize_for_json(v) for k, v in data.items()}
    elif isinstance(data, (list, tuple)):
        return [_sanitize_for_json(item) for item in data]
    else:
        return data


def canonical_json(data: Any) -> str:
    """Produce deterministic JSON representation for hashing.

    Keys are sorted recursively, output is compact and non-ASCII characters
    are kept as-is.

    Args:
        data: Any JSON-serializable data (dict, list, str, number, bool, None)

    Returns:
        Canonical JSON string suitable for hashing.

    Raises:
        ValueError: If data contains NaN, Infinity, or -Infinity values.

    Example:
        >>> canonical_json({"b": 1, "a": 2})
        '{"a":2,"b":1}'
    """
    sanitized = _sanitize_for_json(data)

    return json.dumps(
        sanitized,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )


def compute_reference_token(entry_data: dict[str, Any]) -> str:
    """Compute the reference token of an audit entry.

    The token covers:
    - grievance_id: Grievance the entry belongs to
    - sequence: Position in the grievance's chain
    - event_type: Audit event type value
    - payload: Structured event data (canonical JSON)
    - recorded_at: Timestamp of the transition (ISO format)
    - prev_hash: Token of the previous entry (GENESIS_HASH for sequence 1)
    - actor_id: Acting identity (if present)

    Args:
        entry_data: Dictionary containing the entry fields.

    Returns:
        Lowercase hexadecimal SHA-256 hash (64 characters).
    """
    recorded_at = entry_data["recorded_at"]
    if isinstance(recorded_at, datetime):
        recorded_at_str = recorded_at.isoformat()
    else:
        recorded_at_str = str(recorded_at)

    hashable: dict[str, Any] = {
        "grievance_id": str(entry_data["grievance_id"]),
        "sequence": entry_data["sequence"],
        "event_type": entry_data["event_type"],
        "payload": entry_data["payload"],
        "recorded_at": recorded_at_str,
        "prev_hash": entry_data["prev_hash"],
    }

    # System-initiated entries have no actor
    actor_id = entry_data.get("actor_id")
    if actor_id is not None:
        hashable["actor_id"] = actor_id

    canonical = canonical_json(hashable)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _is_valid_sha256_hex(value: str) -> bool:
    """Check if a string is a 64-character lowercase hexadecimal string."""
    if len(value) != 64:
        return False
    try:
        int(value, 16)
        return value == value.lower()
    except ValueError:
        return False


def get_prev_hash(sequence: int, previous_token: str | None) -> str:
    """Determine the prev_hash for an entry based on its sequence.

    Args:
        sequence: The sequence number of the entry being created.
        previous_token: Reference token of the previous entry. Required
            for sequence > 1.

    Returns:
        GENESIS_HASH for sequence 1, otherwise previous_token.

    Raises:
        ValueError: If sequence < 1, if sequence > 1 without previous_token,
            or if previous_token is not a valid SHA-256 hex string.

    Example:
        >>> get_prev_hash(1, None)
        '0000000000000000000000000000000000000000000000000000000000000000'
    """
    if sequence < 1:
        raise ValueError("sequence must be >= 1")

    if sequence == 1:
        return GENESIS_HASH

    if previous_token is None:
        raise ValueError("previous_token required for sequence > 1")

    if not _is_valid_sha256_hex(previous_token):
        raise ValueError(
            f"previous_token must be a 64-character lowercase hex string, "
            f"got: {previous_token!r}"
        )

    return previous_token
