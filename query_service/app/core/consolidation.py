"""Consolidation-function vocabulary.

The storage tier does the AVERAGE / MAX / MIN math; the gateway only checks
the name before forwarding it.
"""

from .errors import InvalidConsolidation

CONSOLIDATION_FUNCTIONS = ("AVERAGE", "MAX", "MIN")
DEFAULT_CF = "AVERAGE"


def validate_cf(name: str | None) -> bool:
    """True iff *name* is exactly one of ``AVERAGE``, ``MAX``, ``MIN``."""
    return name in CONSOLIDATION_FUNCTIONS


def resolve_cf(name: str | None) -> str:
    """Apply the default to an empty name, then validate.

    Raises:
        InvalidConsolidation: for any name outside the vocabulary.
    """
    if not name:
        name = DEFAULT_CF
    if not validate_cf(name):
        raise InvalidConsolidation(f"invalid consolidation function: {name!r}")
    return name
