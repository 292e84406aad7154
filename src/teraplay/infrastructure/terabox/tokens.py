"""Per-request ``jsToken`` generation."""

from __future__ import annotations

import random
import string

_TOKEN_ALPHABET = string.ascii_letters + string.digits
_TOKEN_LENGTH = 32


def generate_js_token() -> str:
    """Return a fresh opaque client token (32 alphanumeric characters).

    The provider only checks the token's presence, so it is not derived
    from anything and needs no shared state.
    """
    return "".join(random.choices(_TOKEN_ALPHABET, k=_TOKEN_LENGTH))
