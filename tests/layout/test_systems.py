from __future__ import annotations

import itertools

import pytest

from scoresplit.layout import (
    Layout,
    Staff,
    System,
    get_page_systems,
    merge_adjacent_systems,
    pdf_y_to_canvas_y,
    reassign_staffs_by_drag,
    split_system_at_gap,
    split_system_at_position,
)

PAGE_HEIGHT = 842
SCALE = 150 / 72


def _ids():
    counter = itertools.count(1)
    return lambda: f"new-{next(counter)}"


def _layout() -> Layout:
    return Layout(
        staffs=(
            Staff("a", 0, top=780, bottom=700, system_id="S"),
            Staff("b", 0, top=690, bottom=600, system_id="S"),
            Staff("c", 0, top=500, bottom=420, system_id="S"),
            Staff("d", 0, top=410, bottom=330, system_id="S"),
        ),
        systems=(System("S", 0, top=800, bottom=0),),
    )


def _system_of(layout: Layout) -> dict:
    return {staff.id: staff.system_id for staff in layout.staffs}


def test_split_at_gap_cuts_midway_and_moves_lower_staves():
    updated = split_system_at_gap(_layout(), "b", "c", id_factory=_ids())

    assert [(system.id, system.top, system.bottom) for system in updated.systems] == [
        ("S", 800, 550),
        ("new-1", 550, 0),
    ]
    assert _system_of(updated) == {"a": "S", "b": "S", "c": "new-1", "d": "new-1"}


def test_split_at_gap_rejects_reversed_or_foreign_staves():
    layout = _layout()
    other = Layout(
        staffs=layout.staffs + (Staff("x", 1, top=300, bottom=200, system_id="T"),),
        systems=layout.systems + (System("T", 1, top=400, bottom=100),),
    )

    assert split_system_at_gap(layout, "c", "b", id_factory=_ids()) is layout
    assert split_system_at_gap(other, "b", "x", id_factory=_ids()) is other
    assert split_system_at_gap(layout, "b", "missing", id_factory=_ids()) is layout


def test_merge_adjacent_systems_undoes_a_split():
    layout = _layout()
    split = split_system_at_gap(layout, "b", "c", id_factory=_ids())

    merged = merge_adjacent_systems(split, 0, 0)

    assert [(system.id, system.top, system.bottom) for system in merged.systems] == [("S", 800, 0)]
    assert set(_system_of(merged).values()) == {"S"}


def test_merge_without_lower_neighbour_is_noop():
    layout = _layout()

    assert merge_adjacent_systems(layout, 0, 0) is layout
    assert merge_adjacent_systems(layout, 0, -1) is layout


def test_reassign_by_drag_partitions_staves_by_centre():
    split = split_system_at_gap(_layout(), "b", "c", id_factory=_ids())
    target = pdf_y_to_canvas_y(650, PAGE_HEIGHT, SCALE)

    updated = reassign_staffs_by_drag(split, 0, 0, target, PAGE_HEIGHT, SCALE)

    upper, lower = get_page_systems(updated.systems, 0)
    assert upper.bottom == pytest.approx(650)
    assert lower.top == pytest.approx(650)
    # b's centre (645) now sits below the boundary.
    assert _system_of(updated) == {"a": "S", "b": "new-1", "c": "new-1", "d": "new-1"}


def test_reassign_by_drag_clamps_boundary_inside_systems():
    split = split_system_at_gap(_layout(), "b", "c", id_factory=_ids())

    updated = reassign_staffs_by_drag(split, 0, 0, 0, PAGE_HEIGHT, SCALE)

    upper, lower = get_page_systems(updated.systems, 0)
    assert upper.bottom == pytest.approx(790)
    assert upper.top - upper.bottom >= 10
    assert set(_system_of(updated).values()) == {"new-1"}


def test_reassign_with_invalid_index_is_noop():
    layout = _layout()

    assert reassign_staffs_by_drag(layout, 0, 0, 100, PAGE_HEIGHT, SCALE) is layout


def test_split_at_position_in_gap_between_staves():
    updated = split_system_at_position(_layout(), 0, 550, id_factory=_ids())

    assert [system.bottom for system in get_page_systems(updated.systems, 0)] == [550, 0]
    assert _system_of(updated)["c"] == "new-1"


def test_split_at_position_near_staff_edge_uses_neighbouring_gap():
    near_bottom = split_system_at_position(_layout(), 0, 605, id_factory=_ids())
    near_top = split_system_at_position(_layout(), 0, 685, id_factory=_ids())

    assert get_page_systems(near_bottom.systems, 0)[0].bottom == 550
    assert len(near_bottom.staffs) == 4
    assert get_page_systems(near_top.systems, 0)[0].bottom == 695
    assert _system_of(near_top) == {"a": "S", "b": "new-1", "c": "new-1", "d": "new-1"}


def test_split_at_position_inside_staff_splits_staff_then_system():
    updated = split_system_at_position(_layout(), 0, 740, id_factory=_ids())

    assert len(updated.staffs) == 5
    upper = updated.find_staff("a")
    lower = updated.find_staff("new-1")
    assert (upper.top, upper.bottom) == (780, 740)
    assert (lower.top, lower.bottom) == (740, 700)
    assert upper.system_id == "S"
    assert lower.system_id == "new-2"
    assert [system.id for system in get_page_systems(updated.systems, 0)] == ["S", "new-2"]


def test_split_at_position_outside_staves_or_systems_is_noop():
    layout = _layout()

    assert split_system_at_position(layout, 0, 900, id_factory=_ids()) is layout
    assert split_system_at_position(layout, 0, 790, id_factory=_ids()) is layout
    assert split_system_at_position(layout, 3, 400, id_factory=_ids()) is layout
