"""Values that carry an order and a collection that yields them sorted."""

from __future__ import annotations

from dataclasses import dataclass
from operator import attrgetter
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass
class OrderedItem(Generic[T]):
    """A value paired with its position in a group."""

    order: int
    value: T


class OrderedItems(list):
    """A list of ``OrderedItem`` that can be read back in order."""

    def get(self) -> list[Any]:
        """Sort the items by order, in place, and return their values."""
        self.sort(key=attrgetter("order"))
        return [item.value for item in self]


def ordered(order: int, value: T) -> OrderedItem[T]:
    """Wrap ``value`` with the given order."""
    return OrderedItem(order=order, value=value)