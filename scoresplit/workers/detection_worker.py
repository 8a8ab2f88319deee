"""Worker-side request handling and the two worker flavours the pool can drive."""
from __future__ import annotations

import logging
import multiprocessing as mp
import queue
import threading
from typing import Callable, Optional

from .pipeline import run_staff_detection, run_system_detection
from .protocol import (
    DetectStaffsRequest,
    DetectStaffsResponse,
    DetectSystemsRequest,
    DetectSystemsResponse,
    WorkerErrorResponse,
    WorkerRequest,
    WorkerResponse,
)

logger = logging.getLogger(__name__)

MessageHandler = Callable[[WorkerResponse], None]

# Spawn keeps workers independent of the parent's threads and locks.
_MP_CONTEXT = mp.get_context("spawn")


def handle_request(request: WorkerRequest) -> WorkerResponse:
    """Run one detection request; failures come back as an ERROR response."""

    try:
        if isinstance(request, DetectSystemsRequest):
            systems = run_system_detection(
                request.rgba_data,
                request.width,
                request.height,
                request.system_gap_height,
                low_threshold_fraction=request.low_threshold_fraction,
                binary_threshold=request.binary_threshold,
            )
            return DetectSystemsResponse(
                task_id=request.task_id,
                page_index=request.page_index,
                systems=tuple(systems),
            )
        if isinstance(request, DetectStaffsRequest):
            staffs_by_system = run_staff_detection(
                request.rgba_data,
                request.width,
                request.height,
                request.system_boundaries,
                request.part_gap_height,
                low_threshold_fraction=request.low_threshold_fraction,
                binary_threshold=request.binary_threshold,
            )
            return DetectStaffsResponse(
                task_id=request.task_id,
                page_index=request.page_index,
                staffs_by_system=tuple(tuple(staffs) for staffs in staffs_by_system),
            )
        raise TypeError(f"Unsupported request type: {type(request).__name__}")
    except Exception as exc:
        logger.warning("Detection task %s failed: %s", getattr(request, "task_id", "?"), exc)
        return WorkerErrorResponse(task_id=getattr(request, "task_id", ""), message=str(exc))


class ThreadWorker:
    """Runs requests on a background thread of the current process.

    ``terminate`` cannot interrupt a request already running; its response is
    dropped instead.
    """

    def __init__(self, handler: Callable[[WorkerRequest], WorkerResponse] = handle_request) -> None:
        self.on_message: Optional[MessageHandler] = None
        self._handler = handler
        self._inbox: "queue.Queue[Optional[WorkerRequest]]" = queue.Queue()
        self._stopped = threading.Event()
        self._thread = threading.Thread(target=self._run, name="scoresplit-worker", daemon=True)
        self._thread.start()

    def post_message(self, request: WorkerRequest) -> None:
        self._inbox.put(request)

    def terminate(self) -> None:
        self._stopped.set()
        self._inbox.put(None)

    def _run(self) -> None:
        while True:
            request = self._inbox.get()
            if request is None or self._stopped.is_set():
                return
            response = self._handler(request)
            if not self._stopped.is_set() and self.on_message is not None:
                self.on_message(response)


def _process_worker_main(inbox, outbox) -> None:
    while True:
        request = inbox.get()
        if request is None:
            return
        outbox.put(handle_request(request))


class ProcessWorker:
    """Runs requests in a dedicated child process.

    Requests travel through an inbox queue; a listener thread in the parent
    relays responses from the outbox to ``on_message``.
    """

    def __init__(self, poll_interval: float = 0.1) -> None:
        self.on_message: Optional[MessageHandler] = None
        self._poll_interval = poll_interval
        self._inbox = _MP_CONTEXT.Queue()
        self._outbox = _MP_CONTEXT.Queue()
        self._stopped = threading.Event()
        self._proc = _MP_CONTEXT.Process(
            target=_process_worker_main,
            args=(self._inbox, self._outbox),
            daemon=True,
        )
        self._proc.start()
        self._listener = threading.Thread(target=self._relay, name="scoresplit-relay", daemon=True)
        self._listener.start()

    def post_message(self, request: WorkerRequest) -> None:
        self._inbox.put(request)

    def terminate(self) -> None:
        self._stopped.set()
        if self._proc.is_alive():
            self._proc.terminate()
        self._proc.join(timeout=1.0)
        self._inbox.close()
        self._outbox.close()

    def _relay(self) -> None:
        while not self._stopped.is_set():
            try:
                response = self._outbox.get(timeout=self._poll_interval)
            except queue.Empty:
                continue
            except (EOFError, OSError, ValueError):
                return
            if not self._stopped.is_set() and self.on_message is not None:
                self.on_message(response)


def is_worker_available() -> bool:
    """Report whether child-process workers can be created here."""

    try:
        probe = _MP_CONTEXT.Queue()
    except (ImportError, OSError, PermissionError) as exc:
        logger.info("Process workers unavailable: %s", exc)
        return False
    probe.close()
    return True
