"""
Property order allocation.

Every property persisted for a collection must carry an ``order`` used to
sequence it for display. Callers may supply some orders explicitly and leave
the rest out; the allocator fills the missing ones with the smallest free
slots, scanning forward from 0.

Invariants:
    - Explicit orders are never renumbered
    - Every output order is a unique non-negative integer
    - Free slots are handed out in the caller's iteration order, ascending
    - Explicit orders >= the property count are accepted (occupied slots are
      tracked as a set, not a fixed-width array)

Example:
    >>> allocate_orders({"a": {}, "b": {"order": 0}, "c": {}})
    {'a': {'order': 1}, 'b': {'order': 0}, 'c': {'order': 2}}
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from ..errors import ContractViolationError
from .types import is_valid_order


def allocate_orders(properties: Mapping[str, Mapping[str, Any]]) -> dict[str, dict[str, Any]]:
    """Return a copy of ``properties`` with an ``order`` on every entry.

    Args:
        properties: Property name -> partial property mapping; ``order`` optional

    Returns:
        New mapping in the same iteration order; input mappings are not mutated

    Raises:
        ContractViolationError: If an explicit order is not a non-negative
            integer, or two properties claim the same order
    """
    occupied: set[int] = set()
    for name, partial in properties.items():
        if not isinstance(partial, Mapping):
            raise ContractViolationError(f"Property '{name}' must be an object")
        if "order" not in partial:
            continue
        order = partial["order"]
        if not is_valid_order(order):
            raise ContractViolationError(
                f"Property '{name}' has invalid order {order!r}",
                details={"property": name, "order": order},
            )
        if order in occupied:
            raise ContractViolationError(
                f"Order {order} is claimed by more than one property",
                details={"property": name, "order": order},
            )
        occupied.add(order)

    result: dict[str, dict[str, Any]] = {}
    cursor = 0
    for name, partial in properties.items():
        entry = dict(partial)
        if "order" not in entry:
            while cursor in occupied:
                cursor += 1
            entry["order"] = cursor
            occupied.add(cursor)
        result[name] = entry

    return result


def next_append_order(orders: Iterable[int]) -> int:
    """Order for a property appended after ``orders``.

    0 when there are none, otherwise one past the maximum. Gaps below the
    maximum are never reused.
    """
    highest = max(orders, default=None)
    return 0 if highest is None else highest + 1
