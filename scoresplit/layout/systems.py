"""System-level editing: splitting, merging and re-partitioning systems on a page."""
from __future__ import annotations

import logging
from dataclasses import replace

from .coordinates import canvas_y_to_pdf_y
from .model import (
    MIN_SPLIT_HEIGHT,
    IdFactory,
    Layout,
    Staff,
    System,
    get_page_systems,
    new_id,
    sort_top_down,
)
from .separators import split_staff_at_position

logger = logging.getLogger(__name__)


def split_system_at_gap(
    layout: Layout,
    staff_above_id: str,
    staff_below_id: str,
    *,
    id_factory: IdFactory = new_id,
) -> Layout:
    """Split the system shared by two staves at the middle of the gap between them.

    The source system keeps everything above the cut; a new system takes the
    rest together with every staff whose top is at or below ``below.top``.
    """

    above = layout.find_staff(staff_above_id)
    below = layout.find_staff(staff_below_id)
    if above is None or below is None or above.system_id != below.system_id:
        return layout
    if above.top <= below.top:
        return layout

    source = layout.find_system(above.system_id)
    if source is None:
        return layout

    cut = (above.bottom + below.top) / 2
    if not source.bottom < cut < source.top:
        return layout

    created = System(id=id_factory(), page_index=source.page_index, top=cut, bottom=source.bottom)
    systems = []
    for system in layout.systems:
        if system.id == source.id:
            systems.extend([replace(system, bottom=cut), created])
        else:
            systems.append(system)

    staffs = tuple(
        replace(staff, system_id=created.id)
        if staff.system_id == source.id and staff.top <= below.top
        else staff
        for staff in layout.staffs
    )
    logger.debug("Split system %s at %.1f into %s", source.id, cut, created.id)
    return Layout(staffs=staffs, systems=tuple(systems))


def merge_adjacent_systems(layout: Layout, page_index: int, upper_ordinal: int) -> Layout:
    """Fold the system below ``upper_ordinal`` into it."""

    page_systems = get_page_systems(layout.systems, page_index)
    if not 0 <= upper_ordinal < len(page_systems) - 1:
        return layout

    upper = page_systems[upper_ordinal]
    lower = page_systems[upper_ordinal + 1]
    systems = tuple(
        replace(system, bottom=lower.bottom) if system.id == upper.id else system
        for system in layout.systems
        if system.id != lower.id
    )
    staffs = tuple(
        replace(staff, system_id=upper.id) if staff.system_id == lower.id else staff
        for staff in layout.staffs
    )
    return Layout(staffs=staffs, systems=systems)


def reassign_staffs_by_drag(
    layout: Layout,
    page_index: int,
    system_sep_index: int,
    new_canvas_y: float,
    page_height: float,
    scale: float,
) -> Layout:
    """Move the boundary between systems ``system_sep_index`` and the next one.

    Staves of the two systems are re-partitioned by their centre: above the new
    boundary they belong to the upper system, below it to the lower one.  The
    boundary is clamped so both systems keep :data:`MIN_SPLIT_HEIGHT`.
    """

    page_systems = get_page_systems(layout.systems, page_index)
    if not 0 <= system_sep_index < len(page_systems) - 1:
        return layout

    upper = page_systems[system_sep_index]
    lower = page_systems[system_sep_index + 1]
    if upper.top - lower.bottom < 2 * MIN_SPLIT_HEIGHT:
        return layout

    boundary = canvas_y_to_pdf_y(new_canvas_y, page_height, scale)
    boundary = max(lower.bottom + MIN_SPLIT_HEIGHT, min(boundary, upper.top - MIN_SPLIT_HEIGHT))

    def reassign(staff: Staff) -> Staff:
        if staff.system_id not in (upper.id, lower.id):
            return staff
        target = upper.id if staff.center > boundary else lower.id
        return staff if staff.system_id == target else replace(staff, system_id=target)

    systems = []
    for system in layout.systems:
        if system.id == upper.id:
            system = replace(system, bottom=boundary)
        elif system.id == lower.id:
            system = replace(system, top=boundary)
        systems.append(system)
    return Layout(staffs=tuple(reassign(staff) for staff in layout.staffs), systems=tuple(systems))


def split_system_at_position(
    layout: Layout,
    page_index: int,
    pdf_y: float,
    *,
    id_factory: IdFactory = new_id,
) -> Layout:
    """Split the system under ``pdf_y``.

    In order of preference: a click in the gap between two staves splits the
    system there; a click inside a staff but within :data:`MIN_SPLIT_HEIGHT`
    of a neighbouring staff is treated as a click in that gap; otherwise the
    staff under the click is split first and the system is split between the
    two halves.
    """

    system = next(
        (system for system in get_page_systems(layout.systems, page_index) if system.contains(pdf_y)),
        None,
    )
    if system is None:
        return layout

    members = sort_top_down(staff for staff in layout.staffs if staff.system_id == system.id)
    for upper, lower in zip(members, members[1:]):
        if lower.top <= pdf_y <= upper.bottom:
            return split_system_at_gap(layout, upper.id, lower.id, id_factory=id_factory)

    for index, staff in enumerate(members):
        if not staff.bottom < pdf_y < staff.top:
            continue
        if pdf_y - staff.bottom < MIN_SPLIT_HEIGHT and index + 1 < len(members):
            return split_system_at_gap(layout, staff.id, members[index + 1].id, id_factory=id_factory)
        if staff.top - pdf_y < MIN_SPLIT_HEIGHT and index > 0:
            return split_system_at_gap(layout, members[index - 1].id, staff.id, id_factory=id_factory)

        lower_id = id_factory()
        halved = split_staff_at_position(layout, staff.id, pdf_y, id_factory=lambda: lower_id)
        if halved is layout:
            return layout
        return split_system_at_gap(halved, staff.id, lower_id, id_factory=id_factory)

    return layout
