"""
Post identifiers.

Identifiers follow the document-store object id layout: 12 bytes rendered as
24 lowercase hex characters (4-byte timestamp, 5 process-unique bytes, 3-byte
counter). The counter starts at 0 and wraps at 2**24, so ids increase within a
process unless more than 2**24 are issued in the same second.
"""
from __future__ import annotations

import re
import secrets
import time
from itertools import count
from threading import Lock
from typing import Any

from .errors import InvalidIdentifierError

IDENTIFIER_LENGTH = 24

_IDENTIFIER_RE = re.compile(r"[0-9a-fA-F]{24}")

_PROCESS_UNIQUE = secrets.token_bytes(5)
_counter = count()
_counter_lock = Lock()


# PUBLIC_INTERFACE
def check_identifier(raw: Any) -> str:
    """
    Return the normalized (lowercase) identifier, or raise InvalidIdentifierError
    when `raw` is not exactly 24 hexadecimal characters.
    """
    if not isinstance(raw, str) or _IDENTIFIER_RE.fullmatch(raw) is None:
        raise InvalidIdentifierError(raw)
    return raw.lower()


# PUBLIC_INTERFACE
def generate_identifier() -> str:
    """Allocate a new identifier. Never returns the same value twice in a process."""
    with _counter_lock:
        seq = next(_counter) & 0xFFFFFF
    raw = (
        int(time.time()).to_bytes(4, "big")
        + _PROCESS_UNIQUE
        + seq.to_bytes(3, "big")
    )
    return raw.hex()
