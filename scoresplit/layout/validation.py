"""Read-only diagnostics over the staves of a document.

None of these checks block editing; they only report what looks suspicious so
the caller can surface it.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Literal, Optional

from .model import Staff, group_by_system

ValidationSeverity = Literal["success", "warning"]


@dataclass(frozen=True)
class ValidationMessage:
    severity: ValidationSeverity
    message_key: str
    message_params: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class SystemStaffCount:
    page_index: int
    system_id: str
    count: int


@dataclass(frozen=True)
class StaffCountConsistency:
    is_consistent: bool
    expected_count: Optional[int]
    mismatches: List[SystemStaffCount]


@dataclass(frozen=True)
class LabelCompleteness:
    unlabeled_count: int
    total_count: int


@dataclass(frozen=True)
class DuplicateLabels:
    page_index: int
    system_id: str
    duplicate_labels: List[str]


@dataclass(frozen=True)
class SystemLabels:
    page_index: int
    system_id: str
    labels: List[str]


@dataclass(frozen=True)
class LabelConsistency:
    is_consistent: bool
    expected_labels: List[str]
    mismatches: List[SystemLabels]


def validate_staff_count_consistency(staffs: Iterable[Staff]) -> StaffCountConsistency:
    """Compare every system's staff count with the most common count.

    Ties between equally common counts go to the larger count.
    """

    grouped = group_by_system(staffs)
    if not grouped:
        return StaffCountConsistency(is_consistent=True, expected_count=None, mismatches=[])

    counts = [
        SystemStaffCount(page_index=group[0].page_index, system_id=system_id, count=len(group))
        for system_id, group in grouped.items()
    ]
    frequency = Counter(entry.count for entry in counts)
    expected = max(frequency, key=lambda count: (frequency[count], count))

    mismatches = sorted(
        (entry for entry in counts if entry.count != expected),
        key=lambda entry: (entry.page_index, entry.system_id),
    )
    return StaffCountConsistency(
        is_consistent=not mismatches,
        expected_count=expected,
        mismatches=mismatches,
    )


def validate_label_completeness(staffs: Iterable[Staff]) -> LabelCompleteness:
    staffs = list(staffs)
    return LabelCompleteness(
        unlabeled_count=sum(1 for staff in staffs if not staff.label),
        total_count=len(staffs),
    )


def validate_duplicate_labels_in_systems(staffs: Iterable[Staff]) -> List[DuplicateLabels]:
    results: List[DuplicateLabels] = []
    for system_id, group in group_by_system(staffs).items():
        counts = Counter(staff.label for staff in group if staff.label)
        duplicates = [label for label, count in counts.items() if count > 1]
        if duplicates:
            results.append(
                DuplicateLabels(
                    page_index=group[0].page_index,
                    system_id=system_id,
                    duplicate_labels=duplicates,
                )
            )
    return results


def validate_label_consistency(staffs: Iterable[Staff]) -> LabelConsistency:
    """Check that every system carries the same label sequence, top-down.

    The reference sequence is the first fully labelled system in ``system_id``
    order, or the first system when none is fully labelled.
    """

    grouped = group_by_system(staffs)
    if not grouped:
        return LabelConsistency(is_consistent=True, expected_labels=[], mismatches=[])

    systems = sorted(grouped.items())
    expected = [staff.label for staff in systems[0][1]]
    for _, group in systems:
        if all(staff.label for staff in group):
            expected = [staff.label for staff in group]
            break

    mismatches = [
        SystemLabels(
            page_index=group[0].page_index,
            system_id=system_id,
            labels=[staff.label for staff in group],
        )
        for system_id, group in systems
        if [staff.label for staff in group] != expected
    ]
    return LabelConsistency(
        is_consistent=not mismatches,
        expected_labels=expected,
        mismatches=mismatches,
    )


def get_staff_step_validations(staffs: Iterable[Staff]) -> List[ValidationMessage]:
    result = validate_staff_count_consistency(staffs)
    if result.is_consistent:
        return [ValidationMessage("success", "validation.staffCountMatch")]
    return [
        ValidationMessage(
            "warning",
            "validation.staffCountMismatch",
            {"mismatchCount": len(result.mismatches)},
        )
    ]


def get_label_step_validations(staffs: Iterable[Staff]) -> List[ValidationMessage]:
    staffs = list(staffs)
    messages: List[ValidationMessage] = []

    completeness = validate_label_completeness(staffs)
    if completeness.unlabeled_count > 0:
        messages.append(
            ValidationMessage(
                "warning",
                "validation.unlabeledStaffs",
                {"count": completeness.unlabeled_count, "total": completeness.total_count},
            )
        )

    duplicates = validate_duplicate_labels_in_systems(staffs)
    if duplicates:
        messages.append(
            ValidationMessage("warning", "validation.duplicateLabels", {"systemCount": len(duplicates)})
        )

    consistency = validate_label_consistency(staffs)
    if not consistency.is_consistent:
        messages.append(
            ValidationMessage(
                "warning",
                "validation.labelOrderMismatch",
                {"mismatchCount": len(consistency.mismatches)},
            )
        )

    if not messages:
        messages.append(ValidationMessage("success", "validation.labelsComplete"))
    return messages
