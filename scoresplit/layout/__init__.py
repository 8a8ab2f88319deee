"""Layout detection and editing: systems, staves, separators and history."""

from .coordinates import canvas_y_to_pdf_y, get_scale, pdf_y_to_canvas_y
from .history import (
    LayoutSession,
    UndoHistory,
    can_redo,
    can_undo,
    clear_history,
    create_history,
    push_state,
    redo,
    undo,
)
from .model import (
    MIN_SPLIT_HEIGHT,
    Layout,
    Staff,
    System,
    apply_system_labels_to_all,
    build_system_ordinal_map,
    delete_staff,
    get_page_staffs,
    get_page_systems,
    get_system_ordinal,
    new_id,
    relabel_staff,
    staffs_match_systems,
    update_staff,
)
from .projection_analysis import Boundary, Gap, find_content_bounds, find_gaps
from .separators import (
    Region,
    Separator,
    SystemGroup,
    add_staff_at_position,
    apply_separator_drag,
    build_group_detail,
    compute_page_separators,
    compute_separators,
    compute_system_groups,
    merge_separator,
    split_staff_at_position,
)
from .staff_detection import detect_staff_boundaries, detect_staffs_in_system
from .system_detection import detect_system_boundaries
from .systems import (
    merge_adjacent_systems,
    reassign_staffs_by_drag,
    split_system_at_gap,
    split_system_at_position,
)
from .validation import (
    ValidationMessage,
    get_label_step_validations,
    get_staff_step_validations,
    validate_duplicate_labels_in_systems,
    validate_label_completeness,
    validate_label_consistency,
    validate_staff_count_consistency,
)

__all__ = [
    "Boundary",
    "Gap",
    "Layout",
    "LayoutSession",
    "MIN_SPLIT_HEIGHT",
    "Region",
    "Separator",
    "Staff",
    "System",
    "SystemGroup",
    "UndoHistory",
    "ValidationMessage",
    "add_staff_at_position",
    "apply_separator_drag",
    "apply_system_labels_to_all",
    "build_group_detail",
    "build_system_ordinal_map",
    "can_redo",
    "can_undo",
    "canvas_y_to_pdf_y",
    "clear_history",
    "compute_page_separators",
    "compute_separators",
    "compute_system_groups",
    "create_history",
    "delete_staff",
    "detect_staff_boundaries",
    "detect_staffs_in_system",
    "detect_system_boundaries",
    "find_content_bounds",
    "find_gaps",
    "get_label_step_validations",
    "get_page_staffs",
    "get_page_systems",
    "get_scale",
    "get_staff_step_validations",
    "get_system_ordinal",
    "merge_adjacent_systems",
    "merge_separator",
    "new_id",
    "pdf_y_to_canvas_y",
    "push_state",
    "reassign_staffs_by_drag",
    "redo",
    "relabel_staff",
    "split_staff_at_position",
    "split_system_at_gap",
    "split_system_at_position",
    "staffs_match_systems",
    "undo",
    "update_staff",
    "validate_duplicate_labels_in_systems",
    "validate_label_completeness",
    "validate_label_consistency",
    "validate_staff_count_consistency",
]
