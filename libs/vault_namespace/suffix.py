"""Random namespace suffix generation.

The suffix is generated once per provisioning run by the caller and then
passed into the resolver, which never generates randomness itself. Pin the
value in configuration (VAULT_NS_RANDOM_SUFFIX) to target the same namespace
on later runs.
"""

from __future__ import annotations

import re
import secrets

DEFAULT_SUFFIX_BYTES = 4

_SUFFIX_PATTERN = re.compile(r"^[0-9a-f]+$")


def generate_random_suffix(byte_length: int = DEFAULT_SUFFIX_BYTES) -> str:
    """Return a lowercase hex token of ``2 * byte_length`` characters.

    Raises:
        ValueError: If byte_length is not positive
    """
    if byte_length < 1:
        raise ValueError(f"byte_length must be positive, got {byte_length}")
    return secrets.token_hex(byte_length)


def is_valid_suffix(value: str) -> bool:
    return bool(value) and bool(_SUFFIX_PATTERN.match(value))
