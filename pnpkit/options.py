"""Functional options applied to a settings object."""

from __future__ import annotations

from typing import Callable, TypeVar

T = TypeVar("T")

Option = Callable[[T], None]


def apply_options(target: T, *args: Option) -> T:
    """Apply each option to ``target`` in order and return ``target``."""
    for option in args:
        option(target)
    return target