"""Mini README: Helpers for the opaque identities used by the ledger.

Identities are plain strings. Hex addresses (``0x`` followed by 40 hex
digits) are lower-cased so that checksummed and lower-case spellings of the
same address compare equal; any other non-empty string is accepted verbatim
after trimming.
"""

from __future__ import annotations

import hashlib
import re
from typing import Optional

from .errors import InvalidAddress

ZERO_ADDRESS = "0x" + "0" * 40

_HEX_ADDRESS = re.compile(r"^0[xX][0-9a-fA-F]{40}$")


def is_null_address(value: Optional[object]) -> bool:
    """Return True for ``None``, blank strings and the zero address."""

    if value is None:
        return True
    if not isinstance(value, str):
        return False
    stripped = value.strip()
    return not stripped or stripped.lower() == ZERO_ADDRESS


def normalise_address(value: Optional[object], *, label: str = "identity") -> str:
    """Return the canonical spelling of an identity or raise ``InvalidAddress``."""

    if not isinstance(value, str) or not value.strip():
        raise InvalidAddress(f"Invalid {label} address")
    stripped = value.strip()
    if _HEX_ADDRESS.match(stripped):
        return stripped.lower()
    return stripped


def generate_address(seed: str) -> str:
    """Derive a deterministic 20-byte hex address from ``seed``."""

    digest = hashlib.sha256(seed.encode("utf-8")).hexdigest()
    return "0x" + digest[:40]
