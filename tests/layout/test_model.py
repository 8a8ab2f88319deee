from __future__ import annotations

from scoresplit.layout import (
    Layout,
    Staff,
    System,
    apply_system_labels_to_all,
    build_system_ordinal_map,
    delete_staff,
    get_page_systems,
    get_system_ordinal,
    relabel_staff,
    staffs_match_systems,
    update_staff,
)


def _layout() -> Layout:
    systems = (
        System("s-low", 0, top=400, bottom=0),
        System("s-high", 0, top=800, bottom=400),
        System("s-next", 1, top=800, bottom=0),
    )
    staffs = (
        Staff("a", 0, top=780, bottom=700, label="Violin", system_id="s-high"),
        Staff("b", 0, top=690, bottom=600, label="Cello", system_id="s-high"),
        Staff("c", 0, top=380, bottom=300, system_id="s-low"),
        Staff("d", 0, top=290, bottom=200, system_id="s-low"),
        Staff("e", 0, top=190, bottom=100, label="Oboe", system_id="s-low"),
    )
    return Layout(staffs=staffs, systems=systems)


def test_layout_coerces_sequences_to_tuples():
    layout = Layout(staffs=[Staff("a", 0, 10, 0)], systems=[])

    assert isinstance(layout.staffs, tuple)
    assert isinstance(layout.systems, tuple)


def test_page_systems_are_ordered_top_down():
    layout = _layout()

    assert [system.id for system in get_page_systems(layout.systems, 0)] == ["s-high", "s-low"]
    assert get_system_ordinal(layout.systems, 0, "s-low") == 1
    assert get_system_ordinal(layout.systems, 0, "s-next") == -1
    assert build_system_ordinal_map(layout.systems, 1) == {"s-next": 0}


def test_staffs_match_systems_requires_known_system_ids():
    layout = _layout()

    assert staffs_match_systems(layout.staffs, layout.systems)
    assert not staffs_match_systems([], layout.systems)
    assert not staffs_match_systems(layout.staffs + (Staff("x", 0, 50, 0, system_id="gone"),), layout.systems)


def test_relabel_returns_new_layout_and_keeps_original():
    layout = _layout()

    updated = relabel_staff(layout, "c", "Flute")

    assert updated is not layout
    assert updated.find_staff("c").label == "Flute"
    assert layout.find_staff("c").label == ""


def test_noop_mutations_return_the_same_instance():
    layout = _layout()

    assert relabel_staff(layout, "a", "Violin") is layout
    assert relabel_staff(layout, "missing", "Flute") is layout
    assert delete_staff(layout, "missing") is layout
    assert update_staff(layout, Staff("missing", 0, 10, 0)) is layout


def test_delete_staff_removes_only_that_staff():
    updated = delete_staff(_layout(), "b")

    assert [staff.id for staff in updated.staffs] == ["a", "c", "d", "e"]
    assert len(updated.systems) == 3


def test_apply_system_labels_copies_labels_by_position():
    updated = apply_system_labels_to_all(_layout(), "s-high")

    labels = {staff.id: staff.label for staff in updated.staffs}
    # The third staff of s-low has no template counterpart and keeps its label.
    assert labels == {"a": "Violin", "b": "Cello", "c": "Violin", "d": "Cello", "e": "Oboe"}


def test_apply_system_labels_with_unknown_template_is_noop():
    layout = _layout()

    assert apply_system_labels_to_all(layout, "unknown") is layout
    assert apply_system_labels_to_all(layout, "") is layout
