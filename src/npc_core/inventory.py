# slot containers and stack-merging transfers
# src/npc_core/inventory.py
"""
Inventory transfer between two slot containers.

Rules:
- Units are conserved: every unit removed from a source slot lands in a
  destination slot. Nothing is created or destroyed here.
- Each qualifying source slot is committed on its own. A request that
  runs out of destination space stops early and keeps what already moved;
  there is no rollback.
- Source slots are re-read at the moment they are processed. External
  containers can change between ticks, so nothing is cached.
- Insertion merges into existing stacks of the same item first, then
  fills empty slots.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from spec.types import ItemStack
from spec.world import Container


log = logging.getLogger(__name__)


StackMatcher = Callable[[ItemStack], bool]


# ---------------------------------------------------------------------------
# Concrete container
# ---------------------------------------------------------------------------


class SlotContainer:
    """
    List-backed Container used for the agent's own inventory and in tests.

    Host adapters wrapping real game containers only need to satisfy the
    spec.world.Container protocol; they do not have to subclass this.
    """

    def __init__(self, size: int, *, max_stack_size: int = 64) -> None:
        if size < 1:
            raise ValueError(f"container size must be >= 1, got {size}")
        self._slots: List[Optional[ItemStack]] = [None] * size
        self._max_stack_size = max_stack_size
        self.change_count: int = 0

    @property
    def size(self) -> int:
        return len(self._slots)

    @property
    def max_stack_size(self) -> int:
        return self._max_stack_size

    def get(self, slot: int) -> Optional[ItemStack]:
        return self._slots[slot]

    def set(self, slot: int, stack: Optional[ItemStack]) -> None:
        self._slots[slot] = stack

    def set_changed(self) -> None:
        self.change_count += 1

    def stacks(self) -> List[Optional[ItemStack]]:
        """Copy of the slot list (None for empty slots)."""
        return list(self._slots)

    def total(self, item_id: Optional[str] = None) -> int:
        """Units held, optionally of a single item id."""
        return sum(
            s.count
            for s in self._slots
            if s is not None and (item_id is None or s.item_id == item_id)
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def capacity_for(container: Container, stack: ItemStack) -> int:
    """Largest stack of this item a single slot of `container` may hold."""
    return max(1, min(container.max_stack_size, stack.max_size))


def name_matcher(item_filter: Optional[str]) -> Optional[StackMatcher]:
    """
    Case-insensitive substring match on the item's display name.

    None / empty filter means "match everything" and returns None.
    """
    if not item_filter:
        return None
    needle = item_filter.lower()

    def _match(stack: ItemStack) -> bool:
        return needle in stack.display_name.lower()

    return _match


def insert_stack(container: Container, stack: ItemStack) -> int:
    """
    Insert up to `stack.count` units into `container`.

    Merges into same-item slots (in slot order) up to capacity, then fills
    empty slots. Returns the number of units accepted; the caller owns the
    remainder.
    """
    cap = capacity_for(container, stack)
    remaining = stack.count

    # Pass 1: top up existing stacks of the same item.
    for slot in range(container.size):
        if remaining <= 0:
            break
        current = container.get(slot)
        if current is None or not current.same_item(stack):
            continue
        space = cap - current.count
        if space <= 0:
            continue
        amount = min(space, remaining)
        container.set(slot, current.with_count(current.count + amount))
        remaining -= amount

    # Pass 2: empty slots.
    for slot in range(container.size):
        if remaining <= 0:
            break
        if container.get(slot) is not None:
            continue
        amount = min(cap, remaining)
        container.set(slot, stack.with_count(amount))
        remaining -= amount

    return stack.count - remaining


# ---------------------------------------------------------------------------
# Transfer
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MovedStack:
    """Units moved out of a single source slot."""

    name: str
    count: int
    slot: int


@dataclass
class TransferResult:
    """
    Outcome of a transfer() call.

    `dest_full` is set when the destination refused units and the transfer
    stopped early. `remaining` is what was requested but not moved.
    """

    requested: int
    moved: List[MovedStack] = field(default_factory=list)
    dest_full: bool = False

    @property
    def total_moved(self) -> int:
        return sum(m.count for m in self.moved)

    @property
    def remaining(self) -> int:
        return max(0, self.requested - self.total_moved)

    def describe(self, full_label: str) -> str:
        """'40x stone, 3x dirt' plus `full_label` when the destination filled."""
        parts = [f"{m.count}x {m.name}" for m in self.moved]
        if self.dest_full:
            parts.append(full_label)
        return ", ".join(parts)


def transfer(
    source: Container,
    dest: Container,
    matcher: Optional[StackMatcher],
    count: int,
) -> TransferResult:
    """
    Move up to `count` units of matching items from `source` to `dest`.

    Scans source slots in order. For each non-empty matching slot, tries
    to insert min(remaining, slot count) units and shrinks the source slot
    by exactly what the destination accepted.
    """
    result = TransferResult(requested=max(0, int(count)))
    remaining = result.requested

    for slot in range(source.size):
        if remaining <= 0:
            break

        stack = source.get(slot)
        if stack is None:
            continue
        if matcher is not None and not matcher(stack):
            continue

        to_take = min(remaining, stack.count)
        offered = stack.with_count(to_take)
        if offered is None:
            continue

        accepted = insert_stack(dest, offered)
        if accepted > 0:
            source.set(slot, stack.with_count(stack.count - accepted))
            result.moved.append(
                MovedStack(name=stack.display_name, count=accepted, slot=slot)
            )
            remaining -= accepted

        if accepted < to_take:
            result.dest_full = True
            break

    source.set_changed()
    dest.set_changed()

    log.debug(
        "transfer requested=%d moved=%d dest_full=%s",
        result.requested,
        result.total_moved,
        result.dest_full,
    )
    return result


def take(
    container: Container,
    inventory: Container,
    item_filter: Optional[str],
    count: int,
) -> TransferResult:
    """External container -> agent inventory."""
    return transfer(container, inventory, name_matcher(item_filter), count)


def put(
    inventory: Container,
    container: Container,
    item_name: str,
    count: int,
) -> TransferResult:
    """Agent inventory -> external container."""
    return transfer(inventory, container, name_matcher(item_name), count)


__all__ = [
    "SlotContainer",
    "StackMatcher",
    "MovedStack",
    "TransferResult",
    "capacity_for",
    "name_matcher",
    "insert_stack",
    "transfer",
    "take",
    "put",
]
