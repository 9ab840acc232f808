"""Licence key derivation and verification.

Keys are derived offline from the buyer's email and the build secret:

* ``derive_license_key`` – the key a vendor hands out for an email.
* ``verify_license_key`` – check a user-supplied (email, key) pair.

Both functions are pure; nothing here touches the disk.
"""

from __future__ import annotations

import hashlib
import hmac

from .secret import reveal_secret

# Number of hex characters kept from the digest and the size of each group
# in the formatted key (XXXXXXXX-XXXXXXXX-XXXXXXXX-XXXXXXXX).
KEY_HEX_LENGTH = 32
KEY_GROUP_SIZE = 8


def normalize_email(email: str) -> str:
    """Lower-case and trim *email* the same way everywhere it is stored."""
    return email.lower().strip()


def derive_license_key(email: str) -> str:
    """Return the licence key for *email* under this build's secret."""
    data = f"{normalize_email(email)}:{reveal_secret()}"
    digest = hashlib.sha256(data.encode("utf-8")).hexdigest()[:KEY_HEX_LENGTH]
    groups = [
        digest[i:i + KEY_GROUP_SIZE] for i in range(0, KEY_HEX_LENGTH, KEY_GROUP_SIZE)
    ]
    return "-".join(groups).upper()


def verify_license_key(email: str, key: str) -> bool:
    """Return ``True`` when *key* (any case) is the key derived for *email*."""
    expected = derive_license_key(email)
    return hmac.compare_digest(expected.encode("utf-8"), key.upper().encode("utf-8"))


__all__ = [
    "normalize_email",
    "derive_license_key",
    "verify_license_key",
]
