"""Part derivation and output page planning."""

from .assembly import (
    AssemblyOptions,
    Part,
    StaffPlacement,
    derive_parts_from_staffs,
    part_file_name,
    plan_part_pages,
)

__all__ = [
    "AssemblyOptions",
    "Part",
    "StaffPlacement",
    "derive_parts_from_staffs",
    "part_file_name",
    "plan_part_pages",
]
