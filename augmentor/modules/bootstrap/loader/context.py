"""Ambient symbol-resolution context.

Code generators inside the framework import modules lazily without naming
a tier. While a tier is installed here, the import hook resolves such
imports through that tier's delegation chain.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING, Iterator, Optional

if TYPE_CHECKING:  # pragma: no cover
    from .tiers import ArchiveTier

_AMBIENT_TIER: ContextVar[Optional["ArchiveTier"]] = ContextVar("ambient_resolution_tier", default=None)


def current_resolution_tier() -> Optional["ArchiveTier"]:
    return _AMBIENT_TIER.get()


@contextmanager
def ambient_resolution_context(tier: "ArchiveTier") -> Iterator["ArchiveTier"]:
    """Install ``tier`` for the duration of the block and restore the previous one."""
    token = _AMBIENT_TIER.set(tier)
    try:
        yield tier
    finally:
        _AMBIENT_TIER.reset(token)
