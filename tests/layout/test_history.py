from __future__ import annotations

import itertools

from scoresplit.layout import (
    Layout,
    LayoutSession,
    Staff,
    System,
    apply_system_labels_to_all,
    can_redo,
    can_undo,
    clear_history,
    create_history,
    delete_staff,
    push_state,
    redo,
    relabel_staff,
    split_staff_at_position,
    undo,
)


def test_undo_then_push_discards_redo_branch():
    history = create_history("A")
    history = push_state(history, "B")
    history = push_state(history, "C")

    history = undo(history)
    assert history.present == "B"
    assert can_redo(history)

    history = push_state(history, "D")

    assert history.present == "D"
    assert history.past == ("A", "B")
    assert history.future == ()
    assert not can_redo(history)


def test_redo_restores_undone_state():
    history = push_state(create_history(1), 2)

    history = redo(undo(history))

    assert history.present == 2
    assert history.past == (1,)


def test_undo_and_redo_at_the_ends_return_same_history():
    history = create_history("only")

    assert undo(history) is history
    assert redo(history) is history
    assert not can_undo(history)


def test_push_state_drops_oldest_entries_beyond_max_size():
    history = create_history(0)
    for value in range(1, 8):
        history = push_state(history, value, max_size=3)

    assert history.past == (4, 5, 6)
    assert history.present == 7


def test_clear_history_keeps_present():
    history = push_state(push_state(create_history("a"), "b"), "c")

    cleared = clear_history(undo(history))

    assert cleared.present == "b"
    assert cleared.past == ()
    assert cleared.future == ()


def _session() -> LayoutSession:
    return LayoutSession(
        Layout(
            staffs=(Staff("a", 0, top=700, bottom=600, system_id="s"),),
            systems=(System("s", 0, top=720, bottom=580),),
        )
    )


def test_session_records_only_effective_mutations():
    session = _session()

    assert session.apply(relabel_staff, "a", "Cello")
    assert not session.apply(relabel_staff, "a", "Cello")
    assert not session.apply(delete_staff, "missing")

    assert len(session.history.past) == 1
    assert session.layout.find_staff("a").label == "Cello"


def test_session_undo_redo_round_trip():
    session = _session()
    counter = itertools.count(1)
    session.apply(split_staff_at_position, "a", 650, id_factory=lambda: f"n{next(counter)}")
    split_layout = session.layout

    assert session.undo()
    assert len(session.layout.staffs) == 1
    assert session.can_redo
    assert session.redo()
    assert session.layout is split_layout
    assert not session.redo()


def test_session_load_resets_history():
    session = _session()
    session.apply(relabel_staff, "a", "Cello")

    session.load(Layout())

    assert session.layout == Layout()
    assert not session.can_undo
    assert not session.can_redo


def test_session_replace_pushes_state():
    session = _session()
    replacement = Layout(staffs=(Staff("z", 0, 100, 50),))

    session.replace(replacement)

    assert session.layout is replacement
    assert session.undo()
    assert session.layout.find_staff("a") is not None


def test_session_ignores_mutations_that_rebuild_an_equal_layout():
    session = LayoutSession(
        Layout(
            staffs=(
                Staff("a", 0, top=700, bottom=600, label="Flute", system_id="s1"),
                Staff("b", 0, top=300, bottom=200, label="Flute", system_id="s2"),
            ),
            systems=(System("s1", 0, top=720, bottom=580), System("s2", 0, top=320, bottom=180)),
        )
    )

    assert not session.apply(apply_system_labels_to_all, "s1")
    assert not session.can_undo
