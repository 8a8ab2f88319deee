"""Derived separator/region views and the staff-level editing operations.

Separators, regions and system groups are recomputed from a :class:`Layout`
on every call and never stored.  Separator indices handed to
:func:`apply_separator_drag` refer to :func:`compute_page_separators`, i.e.
the separators of every system group of the page, top group first.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, List, Literal, Optional, Sequence, Tuple

from .coordinates import canvas_y_to_pdf_y, pdf_y_to_canvas_y
from .model import (
    MIN_SPLIT_HEIGHT,
    IdFactory,
    Layout,
    Staff,
    System,
    get_page_staffs,
    get_page_systems,
    new_id,
    sort_top_down,
)

SeparatorKind = Literal["edge", "part"]

# Half of the height given to a staff created by hand (page units).
DEFAULT_HALF_HEIGHT = 25


@dataclass(frozen=True)
class Separator:
    kind: SeparatorKind
    canvas_y: float
    staff_above_id: Optional[str]
    staff_below_id: Optional[str]


@dataclass(frozen=True)
class Region:
    staff_id: str
    top_canvas_y: float
    bottom_canvas_y: float
    label: str
    system_id: str


@dataclass(frozen=True)
class SystemGroup:
    ordinal: int
    system_id: str
    top_canvas_y: float
    bottom_canvas_y: float
    separators: Tuple[Separator, ...]
    regions: Tuple[Region, ...]


def build_group_detail(
    staffs: Iterable[Staff],
    page_height: float,
    scale: float,
) -> Tuple[List[Separator], List[Region]]:
    """Build the separators and regions of one group of staves.

    An ``edge`` separator sits on the top of the first staff and another on
    the bottom of the last one; a ``part`` separator sits halfway between each
    pair of consecutive staves.
    """

    ordered = sort_top_down(staffs)
    if not ordered:
        return [], []

    def to_canvas(pdf_y: float) -> float:
        return pdf_y_to_canvas_y(pdf_y, page_height, scale)

    separators = [Separator("edge", to_canvas(ordered[0].top), None, ordered[0].id)]
    regions: List[Region] = []
    for index, staff in enumerate(ordered):
        regions.append(
            Region(
                staff_id=staff.id,
                top_canvas_y=to_canvas(staff.top),
                bottom_canvas_y=to_canvas(staff.bottom),
                label=staff.label,
                system_id=staff.system_id,
            )
        )
        if index < len(ordered) - 1:
            following = ordered[index + 1]
            midpoint = (to_canvas(staff.bottom) + to_canvas(following.top)) / 2
            separators.append(Separator("part", midpoint, staff.id, following.id))

    last = ordered[-1]
    separators.append(Separator("edge", to_canvas(last.bottom), last.id, None))
    return separators, regions


compute_separators = build_group_detail


def compute_system_groups(
    page_staffs: Iterable[Staff],
    page_height: float,
    scale: float,
    page_systems: Iterable[System],
) -> List[SystemGroup]:
    """One group per system, top of the page first, empty systems included."""

    page_staffs = list(page_staffs)
    groups: List[SystemGroup] = []
    systems = sorted(page_systems, key=lambda system: system.top, reverse=True)
    for ordinal, system in enumerate(systems):
        members = [staff for staff in page_staffs if staff.system_id == system.id]
        separators, regions = build_group_detail(members, page_height, scale)
        groups.append(
            SystemGroup(
                ordinal=ordinal,
                system_id=system.id,
                top_canvas_y=pdf_y_to_canvas_y(system.top, page_height, scale),
                bottom_canvas_y=pdf_y_to_canvas_y(system.bottom, page_height, scale),
                separators=tuple(separators),
                regions=tuple(regions),
            )
        )
    return groups


def compute_page_separators(
    layout: Layout,
    page_index: int,
    page_height: float,
    scale: float,
) -> List[Separator]:
    groups = compute_system_groups(
        get_page_staffs(layout.staffs, page_index),
        page_height,
        scale,
        get_page_systems(layout.systems, page_index),
    )
    return [separator for group in groups for separator in group.separators]


def apply_separator_drag(
    layout: Layout,
    page_index: int,
    separator_index: int,
    new_canvas_y: float,
    page_height: float,
    scale: float,
    min_height_pdf: float = MIN_SPLIT_HEIGHT,
) -> Layout:
    """Move a separator, clamping so neither neighbour drops below ``min_height_pdf``."""

    separators = compute_page_separators(layout, page_index, page_height, scale)
    if not 0 <= separator_index < len(separators):
        return layout

    separator = separators[separator_index]
    new_pdf_y = canvas_y_to_pdf_y(new_canvas_y, page_height, scale)
    updates = {}

    above = layout.find_staff(separator.staff_above_id) if separator.staff_above_id else None
    if above is not None:
        updates[above.id] = replace(above, bottom=min(new_pdf_y, above.top - min_height_pdf))

    below = layout.find_staff(separator.staff_below_id) if separator.staff_below_id else None
    if below is not None:
        updates[below.id] = replace(below, top=max(new_pdf_y, below.bottom + min_height_pdf))

    if not updates:
        return layout
    return replace(layout, staffs=tuple(updates.get(staff.id, staff) for staff in layout.staffs))


def split_staff_at_position(
    layout: Layout,
    staff_id: str,
    split_pdf_y: float,
    *,
    id_factory: IdFactory = new_id,
) -> Layout:
    """Split a staff in two at ``split_pdf_y``.

    The original id keeps the upper half; the lower half gets a new id and is
    inserted right after it.  The cut is clamped so both halves keep at least
    :data:`MIN_SPLIT_HEIGHT`; staves too short for that are left alone.
    """

    staffs = list(layout.staffs)
    index = next((i for i, staff in enumerate(staffs) if staff.id == staff_id), None)
    if index is None:
        return layout

    staff = staffs[index]
    if staff.height < 2 * MIN_SPLIT_HEIGHT:
        return layout
    cut = max(staff.bottom + MIN_SPLIT_HEIGHT, min(split_pdf_y, staff.top - MIN_SPLIT_HEIGHT))

    upper = replace(staff, bottom=cut)
    lower = replace(staff, id=id_factory(), top=cut)
    staffs[index : index + 1] = [upper, lower]
    return replace(layout, staffs=tuple(staffs))


def merge_separator(layout: Layout, staff_above_id: str, staff_below_id: str) -> Layout:
    """Remove the separator between two staves, keeping the upper staff's identity."""

    above = layout.find_staff(staff_above_id)
    below = layout.find_staff(staff_below_id)
    if above is None or below is None or above.id == below.id:
        return layout

    merged = replace(above, bottom=below.bottom)
    return replace(
        layout,
        staffs=tuple(
            merged if staff.id == above.id else staff
            for staff in layout.staffs
            if staff.id != below.id
        ),
    )


def _infer_system_id(
    page_staffs: Sequence[Staff],
    page_systems: Sequence[System],
    pdf_y: float,
) -> str:
    if page_staffs:
        nearest = min(page_staffs, key=lambda staff: abs(staff.center - pdf_y))
        return nearest.system_id
    for system in page_systems:
        if system.contains(pdf_y):
            return system.id
    return ""


def add_staff_at_position(
    layout: Layout,
    page_index: int,
    pdf_y: float,
    page_height: float,
    *,
    id_factory: IdFactory = new_id,
) -> Layout:
    """Append an unlabelled staff centred on ``pdf_y``, kept inside the page.

    The system is taken from the staff whose centre is closest to ``pdf_y``.
    A page without staves does not leave the new staff orphaned by default:
    it joins the page system containing ``pdf_y`` so that every staff inside
    a system references it, and only a click outside every system yields
    ``""``.
    """

    height = 2 * DEFAULT_HALF_HEIGHT
    top = pdf_y + DEFAULT_HALF_HEIGHT
    bottom = pdf_y - DEFAULT_HALF_HEIGHT
    if top > page_height:
        top, bottom = page_height, page_height - height
    if bottom < 0:
        top, bottom = height, 0

    staff = Staff(
        id=id_factory(),
        page_index=page_index,
        top=top,
        bottom=bottom,
        label="",
        system_id=_infer_system_id(
            get_page_staffs(layout.staffs, page_index),
            get_page_systems(layout.systems, page_index),
            pdf_y,
        ),
    )
    return replace(layout, staffs=layout.staffs + (staff,))
