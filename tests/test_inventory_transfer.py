# tests/test_inventory_transfer.py
"""
Unit tests for npc_core.inventory.

Covers:
- insert_stack merge-then-empty order and per-item caps
- transfer conservation, including destination-full termination
- take / put wrappers and name filtering
"""

from __future__ import annotations

import pytest

from npc_core.inventory import (
    SlotContainer,
    insert_stack,
    name_matcher,
    put,
    take,
    transfer,
)
from spec.types import ItemStack


STONE = "block.minecraft.stone"
DIRT = "block.minecraft.dirt"
IRON = "item.minecraft.iron_ingot"
PEARL = "item.minecraft.ender_pearl"


def fill(container: SlotContainer, *stacks) -> SlotContainer:
    for slot, stack in enumerate(stacks):
        container.set(slot, stack)
    return container


def test_item_stack_rejects_empty_counts() -> None:
    with pytest.raises(ValueError):
        ItemStack(STONE, 0)
    assert ItemStack(STONE, 5).with_count(0) is None
    assert ItemStack(STONE, 5).display_name == "stone"


def test_slot_container_requires_a_slot() -> None:
    with pytest.raises(ValueError):
        SlotContainer(0)


def test_insert_merges_before_using_empty_slots() -> None:
    dest = fill(SlotContainer(3), None, ItemStack(STONE, 60))

    accepted = insert_stack(dest, ItemStack(STONE, 10))

    assert accepted == 10
    assert dest.get(1).count == 64
    assert dest.get(0).count == 6
    assert dest.get(2) is None


def test_insert_respects_item_max_size() -> None:
    dest = SlotContainer(2)

    accepted = insert_stack(dest, ItemStack(PEARL, 20, max_size=16))

    assert accepted == 20
    assert [s.count for s in dest.stacks()] == [16, 4]


def test_insert_reports_partial_acceptance() -> None:
    dest = fill(SlotContainer(1), ItemStack(STONE, 60))
    assert insert_stack(dest, ItemStack(STONE, 10)) == 4
    assert insert_stack(dest, ItemStack(DIRT, 1)) == 0


def test_take_forty_into_single_empty_slot() -> None:
    chest = fill(SlotContainer(27), ItemStack(IRON, 40))
    inventory = SlotContainer(1)

    result = take(chest, inventory, "IRON", 64)

    assert result.total_moved == 40
    assert result.describe("(inventory full)") == "40x iron_ingot"
    assert not result.dest_full
    assert chest.get(0) is None
    assert inventory.get(0) == ItemStack(IRON, 40)


def test_transfer_conserves_units_when_destination_fills() -> None:
    source = fill(SlotContainer(3), ItemStack(STONE, 64), ItemStack(STONE, 64), ItemStack(DIRT, 5))
    dest = fill(SlotContainer(1), ItemStack(STONE, 10))
    before = source.total() + dest.total()

    result = transfer(source, dest, None, 200)

    assert result.dest_full
    assert result.total_moved == 54
    assert source.total() + dest.total() == before
    assert source.get(0).count == 10
    assert source.get(1).count == 64
    assert result.describe("(inventory full)") == "54x stone, (inventory full)"


def test_transfer_conserves_units_on_partial_request() -> None:
    source = fill(SlotContainer(2), ItemStack(DIRT, 30), ItemStack(DIRT, 30))
    dest = SlotContainer(4)

    result = transfer(source, dest, name_matcher("dirt"), 45)

    assert result.total_moved == 45
    assert result.remaining == 0
    assert source.total() == 15
    assert dest.total() == 45
    assert [m.count for m in result.moved] == [30, 15]


def test_transfer_marks_both_sides_changed() -> None:
    source = fill(SlotContainer(1), ItemStack(DIRT, 1))
    dest = SlotContainer(1)

    transfer(source, dest, None, 1)

    assert source.change_count == 1
    assert dest.change_count == 1


def test_put_only_moves_matching_items() -> None:
    inventory = fill(SlotContainer(3), ItemStack(STONE, 8), ItemStack(DIRT, 12))
    chest = SlotContainer(9)

    result = put(inventory, chest, "dirt", 5)

    assert result.describe("(container full)") == "5x dirt"
    assert inventory.get(0) == ItemStack(STONE, 8)
    assert inventory.get(1).count == 7
    assert chest.total(DIRT) == 5


def test_no_match_moves_nothing() -> None:
    chest = fill(SlotContainer(2), ItemStack(STONE, 3))
    inventory = SlotContainer(2)

    result = take(chest, inventory, "diamond", 64)

    assert result.moved == []
    assert result.describe("(inventory full)") == ""
    assert chest.total() == 3


def test_empty_filter_matches_everything() -> None:
    assert name_matcher(None) is None
    assert name_matcher("") is None
    matcher = name_matcher("Ing")
    assert matcher(ItemStack(IRON, 1))
    assert not matcher(ItemStack(STONE, 1))


class HostDrivenContainer(SlotContainer):
    """Slot 0 is replaced by the host between reads, like a live chest."""

    def __init__(self, *host_states: ItemStack) -> None:
        super().__init__(1)
        self._host_states = list(host_states)

    def get(self, slot: int):
        if self._host_states:
            super().set(0, self._host_states.pop(0))
        return super().get(slot)


def test_transfer_reads_slot_contents_on_every_call() -> None:
    chest = HostDrivenContainer(ItemStack(DIRT, 10), ItemStack(STONE, 7))
    inv = SlotContainer(4)

    first = take(chest, inv, None, 3)
    second = take(chest, inv, None, 64)

    assert [(m.name, m.count) for m in first.moved] == [("dirt", 3)]
    assert [(m.name, m.count) for m in second.moved] == [("stone", 7)]
    assert inv.total(DIRT) == 3
    assert inv.total(STONE) == 7
    assert chest.get(0) is None
