"""Group labelled staves into parts and plan where they land on output pages.

Embedding the cropped page regions into a PDF is left to the caller; this
module only decides the order of the staves and their placement.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from ..layout.model import Staff, System, build_system_ordinal_map

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class Part:
    label: str
    staffs: Tuple[Staff, ...]


@dataclass
class AssemblyOptions:
    """Output page geometry in points; defaults describe an A4 page."""

    page_width: float = 595
    page_height: float = 842
    margin_top: float = 36
    margin_bottom: float = 36
    margin_left: float = 36
    margin_right: float = 36
    gap_between_staffs: float = 18

    @property
    def usable_width(self) -> float:
        return self.page_width - self.margin_left - self.margin_right

    @property
    def usable_height(self) -> float:
        return self.page_height - self.margin_top - self.margin_bottom


@dataclass(frozen=True)
class StaffPlacement:
    """A source page band ``[crop_bottom, crop_top]`` drawn at ``(x, y)`` on ``output_page``."""

    output_page: int
    x: float
    y: float
    width: float
    height: float
    source_page_index: int
    crop_top: float
    crop_bottom: float
    staff_id: str


def derive_parts_from_staffs(staffs: Iterable[Staff], systems: Iterable[System] = ()) -> List[Part]:
    """Collect staves sharing a label into parts in reading order.

    Within a part, staves follow page, system (top-down) and vertical
    position.  Parts are ordered by where their first staff appears.
    Unlabelled staves are skipped.
    """

    systems = list(systems)
    ordinals: Dict[int, Dict[str, int]] = {}

    def reading_key(staff: Staff) -> Tuple[int, object, float]:
        if systems:
            page_map = ordinals.setdefault(
                staff.page_index, build_system_ordinal_map(systems, staff.page_index)
            )
            system_key: object = page_map.get(staff.system_id, -1)
        else:
            system_key = staff.system_id
        return staff.page_index, system_key, -staff.top

    grouped: Dict[str, List[Staff]] = {}
    for staff in staffs:
        if staff.label:
            grouped.setdefault(staff.label, []).append(staff)

    parts = [Part(label=label, staffs=tuple(sorted(members, key=reading_key))) for label, members in grouped.items()]
    if systems:
        parts.sort(key=lambda part: reading_key(part.staffs[0]))
    else:
        parts.sort(key=lambda part: (part.staffs[0].page_index, -part.staffs[0].top))
    return parts


def plan_part_pages(
    staffs: Sequence[Staff],
    source_page_widths: Mapping[int, float] | Sequence[float],
    options: AssemblyOptions | None = None,
) -> List[StaffPlacement]:
    """Stack ``staffs`` top-down onto output pages, each scaled to the usable width.

    A staff that would cross the bottom margin starts a new page, unless the
    current page is still empty.  Staves taller than the usable height are
    squeezed to fit it.
    """

    options = options or AssemblyOptions()
    placements: List[StaffPlacement] = []
    page = 0
    page_top = options.page_height - options.margin_top
    cursor = page_top

    for staff in staffs:
        source_width = source_page_widths[staff.page_index]
        scaled_height = staff.height * options.usable_width / source_width

        if cursor - scaled_height < options.margin_bottom and cursor < page_top:
            page += 1
            cursor = page_top

        height = min(scaled_height, options.usable_height)
        placements.append(
            StaffPlacement(
                output_page=page,
                x=options.margin_left,
                y=cursor - height,
                width=options.usable_width,
                height=height,
                source_page_index=staff.page_index,
                crop_top=staff.top,
                crop_bottom=staff.bottom,
                staff_id=staff.id,
            )
        )
        cursor -= height + options.gap_between_staffs
    return placements


def part_file_name(label: str) -> str:
    return _WHITESPACE.sub("_", label) + ".pdf"
