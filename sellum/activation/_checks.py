"""
Activation checks — pure predicates over a store.
"""

from sellum.domain import Store, StoreProfile

TITLE_LENGTH = (10, 100)
DESCRIPTION_LENGTH = (100, 1000)
TAG_COUNT = (1, 15)


def _within(value: int, bounds: tuple[int, int]) -> bool:
    low, high = bounds
    return low <= value <= high


def profile_complete(profile: StoreProfile) -> bool:
    # Image count is not part of the check.
    return (
        _within(len(profile.title), TITLE_LENGTH)
        and _within(len(profile.description), DESCRIPTION_LENGTH)
        and _within(len(profile.tags), TAG_COUNT)
    )


def shipping_registered(store: Store) -> bool:
    """Every store counts as shipping-ready until shipping setup has checks of its own."""
    return True


def payment_method_registered(store: Store) -> bool:
    return store.can_receive_payments


__all__ = (
    "TITLE_LENGTH",
    "DESCRIPTION_LENGTH",
    "TAG_COUNT",
    "profile_complete",
    "shipping_registered",
    "payment_method_registered",
)
