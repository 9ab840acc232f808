"""Build secret used for licence key derivation.

The secret is never kept as a single literal.  It is split into four shards,
each shard reversed, and the shards stored out of order.  ``reveal_secret``
reassembles it in memory on first use.  This only stops casual ``strings``
extraction; it is not encryption.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Tuple

# Position i of the secret comes from _SHARDS[_SHARD_ORDER[i]].
_SHARD_ORDER: Tuple[int, ...] = (1, 3, 0, 2)

# Regenerate with obscure_secret() when rotating the secret for a release.
_SHARDS: Tuple[str, ...] = (
    "db444ccfb231682e",
    "f253c3340f736d62",
    "a0f003a754c03822",
    "7b3c15a3a6a92a77",
)


def _split(value: str, parts: int) -> list:
    base, extra = divmod(len(value), parts)
    pieces = []
    start = 0
    for i in range(parts):
        size = base + (1 if i < extra else 0)
        pieces.append(value[start:start + size])
        start += size
    return pieces


def obscure_secret(secret: str) -> Tuple[str, ...]:
    """Return the shard tuple to paste into ``_SHARDS`` for *secret*."""
    pieces = _split(secret, len(_SHARD_ORDER))
    shards = [""] * len(_SHARD_ORDER)
    for position, slot in enumerate(_SHARD_ORDER):
        shards[slot] = pieces[position][::-1]
    return tuple(shards)


def _reveal(shards: Tuple[str, ...]) -> str:
    return "".join(shards[slot][::-1] for slot in _SHARD_ORDER)


@lru_cache(maxsize=1)
def reveal_secret() -> str:
    return _reveal(_SHARDS)


__all__ = ["reveal_secret", "obscure_secret"]
