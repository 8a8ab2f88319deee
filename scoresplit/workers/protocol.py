"""Messages exchanged between the worker pool and its detection workers."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Tuple, Union

from ..layout.projection_analysis import Boundary


@dataclass(frozen=True)
class DetectSystemsRequest:
    type: ClassVar[str] = "DETECT_SYSTEMS"

    task_id: str
    page_index: int
    rgba_data: bytes = field(repr=False)
    width: int
    height: int
    system_gap_height: int
    low_threshold_fraction: float = 0.05
    binary_threshold: int = 128


@dataclass(frozen=True)
class DetectStaffsRequest:
    type: ClassVar[str] = "DETECT_STAFFS"

    task_id: str
    page_index: int
    rgba_data: bytes = field(repr=False)
    width: int
    height: int
    system_boundaries: Tuple[Boundary, ...]
    part_gap_height: int
    low_threshold_fraction: float = 0.05
    binary_threshold: int = 128


@dataclass(frozen=True)
class DetectSystemsResponse:
    type: ClassVar[str] = "DETECT_SYSTEMS_RESULT"

    task_id: str
    page_index: int
    systems: Tuple[Boundary, ...]


@dataclass(frozen=True)
class DetectStaffsResponse:
    type: ClassVar[str] = "DETECT_STAFFS_RESULT"

    task_id: str
    page_index: int
    staffs_by_system: Tuple[Tuple[Boundary, ...], ...]


@dataclass(frozen=True)
class WorkerErrorResponse:
    type: ClassVar[str] = "ERROR"

    task_id: str
    message: str


WorkerRequest = Union[DetectSystemsRequest, DetectStaffsRequest]
WorkerSuccessResponse = Union[DetectSystemsResponse, DetectStaffsResponse]
WorkerResponse = Union[DetectSystemsResponse, DetectStaffsResponse, WorkerErrorResponse]


class DetectionError(RuntimeError):
    """Raised on the caller side when a worker reports a failed task."""
