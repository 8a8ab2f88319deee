"""Document layout entities: systems, staves and the immutable snapshot holding them."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, Iterable, List, Tuple

IdFactory = Callable[[], str]

# Smallest height (page units) a staff may be shrunk or split to.
MIN_SPLIT_HEIGHT = 10


def new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class System:
    """Vertical band of one page holding a full musical system."""

    id: str
    page_index: int
    top: float
    bottom: float

    @property
    def height(self) -> float:
        return self.top - self.bottom

    def contains(self, pdf_y: float) -> bool:
        return self.bottom <= pdf_y <= self.top


@dataclass(frozen=True)
class Staff:
    """One instrument row; ``system_id`` points at the owning :class:`System`."""

    id: str
    page_index: int
    top: float
    bottom: float
    label: str = ""
    system_id: str = ""

    @property
    def height(self) -> float:
        return self.top - self.bottom

    @property
    def center(self) -> float:
        return (self.top + self.bottom) / 2


@dataclass(frozen=True)
class Layout:
    """Snapshot of every staff and system in the document.

    Mutations never touch a snapshot in place; they build a new one.  An
    operation that has nothing to do returns the very same instance so callers
    can detect no-ops with ``is``.
    """

    staffs: Tuple[Staff, ...] = field(default_factory=tuple)
    systems: Tuple[System, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "staffs", tuple(self.staffs))
        object.__setattr__(self, "systems", tuple(self.systems))

    def find_staff(self, staff_id: str) -> Staff | None:
        return next((staff for staff in self.staffs if staff.id == staff_id), None)

    def find_system(self, system_id: str) -> System | None:
        return next((system for system in self.systems if system.id == system_id), None)


def get_page_systems(systems: Iterable[System], page_index: int) -> List[System]:
    """Systems of ``page_index`` from the top of the page downwards."""

    return sorted(
        (system for system in systems if system.page_index == page_index),
        key=lambda system: system.top,
        reverse=True,
    )


def get_system_ordinal(systems: Iterable[System], page_index: int, system_id: str) -> int:
    for ordinal, system in enumerate(get_page_systems(systems, page_index)):
        if system.id == system_id:
            return ordinal
    return -1


def build_system_ordinal_map(systems: Iterable[System], page_index: int) -> Dict[str, int]:
    return {system.id: ordinal for ordinal, system in enumerate(get_page_systems(systems, page_index))}


def get_page_staffs(staffs: Iterable[Staff], page_index: int) -> List[Staff]:
    return [staff for staff in staffs if staff.page_index == page_index]


def sort_top_down(staffs: Iterable[Staff]) -> List[Staff]:
    return sorted(staffs, key=lambda staff: staff.top, reverse=True)


def staffs_match_systems(staffs: Iterable[Staff], systems: Iterable[System]) -> bool:
    """``True`` when there is at least one staff and each one has a known system."""

    system_ids = {system.id for system in systems}
    staffs = list(staffs)
    return bool(staffs) and all(staff.system_id in system_ids for staff in staffs)


def group_by_system(staffs: Iterable[Staff]) -> Dict[str, List[Staff]]:
    """Group staves by ``system_id`` keeping first-seen order, each sorted top-down."""

    grouped: Dict[str, List[Staff]] = {}
    for staff in staffs:
        grouped.setdefault(staff.system_id, []).append(staff)
    for system_id, group in grouped.items():
        grouped[system_id] = sort_top_down(group)
    return grouped


def update_staff(layout: Layout, staff: Staff) -> Layout:
    """Replace the staff sharing ``staff.id``."""

    if layout.find_staff(staff.id) is None:
        return layout
    return replace(
        layout,
        staffs=tuple(staff if existing.id == staff.id else existing for existing in layout.staffs),
    )


def relabel_staff(layout: Layout, staff_id: str, label: str) -> Layout:
    staff = layout.find_staff(staff_id)
    if staff is None or staff.label == label:
        return layout
    return update_staff(layout, replace(staff, label=label))


def delete_staff(layout: Layout, staff_id: str) -> Layout:
    if layout.find_staff(staff_id) is None:
        return layout
    return replace(layout, staffs=tuple(staff for staff in layout.staffs if staff.id != staff_id))


def apply_system_labels_to_all(layout: Layout, template_system_id: str) -> Layout:
    """Copy the template system's labels onto every other system by position.

    The n-th staff (top-down) of each system receives the n-th template label.
    Staves past the template's length keep their label.  Nothing checks that
    the systems share the same instrumentation; see
    :func:`scoresplit.layout.validation.validate_label_consistency`.
    """

    grouped = group_by_system(layout.staffs)
    template = grouped.get(template_system_id, []) if template_system_id else []
    if not template:
        return layout

    positions = {
        staff.id: index
        for system_id, group in grouped.items()
        if system_id != template_system_id
        for index, staff in enumerate(group)
    }

    relabelled = []
    for staff in layout.staffs:
        index = positions.get(staff.id)
        if index is not None and index < len(template):
            staff = replace(staff, label=template[index].label)
        relabelled.append(staff)
    return replace(layout, staffs=tuple(relabelled))
