"""Parallel per-page detection: message protocol, worker pool and orchestration."""

from .detection import detect_layout, detect_staffs, detect_systems
from .detection_worker import ProcessWorker, ThreadWorker, handle_request, is_worker_available
from .pool import WorkerPool, default_pool_size, run_tasks_sync
from .protocol import (
    DetectionError,
    DetectStaffsRequest,
    DetectStaffsResponse,
    DetectSystemsRequest,
    DetectSystemsResponse,
    WorkerErrorResponse,
)

__all__ = [
    "DetectStaffsRequest",
    "DetectStaffsResponse",
    "DetectSystemsRequest",
    "DetectSystemsResponse",
    "DetectionError",
    "ProcessWorker",
    "ThreadWorker",
    "WorkerErrorResponse",
    "WorkerPool",
    "default_pool_size",
    "detect_layout",
    "detect_staffs",
    "detect_systems",
    "handle_request",
    "is_worker_available",
    "run_tasks_sync",
]
