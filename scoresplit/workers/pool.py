"""Fixed-size pool dispatching detection requests to workers.

Each request carries a ``task_id``; responses are matched back through a
table of pending tasks, so a worker answering out of order (or with a stale
id) never settles the wrong future.
"""
from __future__ import annotations

import logging
import os
import threading
from collections import deque
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Callable, Deque, Dict, Iterable, List, Optional, Protocol

from .detection_worker import ProcessWorker, handle_request
from .protocol import (
    DetectionError,
    WorkerErrorResponse,
    WorkerRequest,
    WorkerResponse,
    WorkerSuccessResponse,
)

logger = logging.getLogger(__name__)

FALLBACK_POOL_SIZE = 4


class Worker(Protocol):
    on_message: Optional[Callable[[WorkerResponse], None]]

    def post_message(self, request: WorkerRequest) -> None: ...

    def terminate(self) -> None: ...


WorkerFactory = Callable[[], Worker]


def default_pool_size() -> int:
    return os.cpu_count() or FALLBACK_POOL_SIZE


@dataclass
class _PoolTask:
    request: WorkerRequest
    future: "Future[WorkerSuccessResponse]"


class WorkerPool:
    """Dispatch requests to ``pool_size`` workers, queueing when all are busy.

    ``terminate`` is a shutdown, not a cancellation: futures still pending at
    that point are never settled.
    """

    def __init__(
        self,
        pool_size: Optional[int] = None,
        worker_factory: Optional[WorkerFactory] = None,
    ) -> None:
        self.pool_size = pool_size or default_pool_size()
        factory = worker_factory or ProcessWorker
        self._lock = threading.Lock()
        self._terminated = False
        self._workers: List[Worker] = []
        self._idle: Deque[Worker] = deque()
        self._queue: Deque[_PoolTask] = deque()
        self._pending: Dict[str, _PoolTask] = {}

        for _ in range(self.pool_size):
            worker = factory()
            worker.on_message = self._make_listener(worker)
            self._workers.append(worker)
            self._idle.append(worker)
        logger.debug("Started worker pool with %d workers", self.pool_size)

    def __enter__(self) -> "WorkerPool":
        return self

    def __exit__(self, *exc_info) -> None:
        self.terminate()

    def submit_task(self, request: WorkerRequest) -> "Future[WorkerSuccessResponse]":
        task = _PoolTask(request=request, future=Future())
        with self._lock:
            if self._terminated:
                raise RuntimeError("Worker pool has been terminated")
            if request.task_id in self._pending or any(
                queued.request.task_id == request.task_id for queued in self._queue
            ):
                raise ValueError(f"Task {request.task_id!r} is already in flight")
            worker = self._idle.popleft() if self._idle else None
            if worker is None:
                self._queue.append(task)
                logger.debug("Queued task %s (%d waiting)", request.task_id, len(self._queue))
                return task.future
            self._pending[request.task_id] = task
        worker.post_message(request)
        return task.future

    def terminate(self) -> None:
        with self._lock:
            workers = list(self._workers)
            self._terminated = True
            self._workers.clear()
            self._idle.clear()
            self._queue.clear()
            self._pending.clear()
        for worker in workers:
            worker.terminate()
        logger.debug("Terminated worker pool")

    def _make_listener(self, worker: Worker) -> Callable[[WorkerResponse], None]:
        def listener(response: WorkerResponse) -> None:
            self._on_response(worker, response)

        return listener

    def _on_response(self, worker: Worker, response: WorkerResponse) -> None:
        with self._lock:
            task = self._pending.pop(response.task_id, None)
            if task is None:
                logger.debug("Ignoring response for unknown task %s", response.task_id)
                return
            next_task = self._queue.popleft() if self._queue else None
            if next_task is not None:
                self._pending[next_task.request.task_id] = next_task
            else:
                self._idle.append(worker)

        if not task.future.done():
            if isinstance(response, WorkerErrorResponse):
                task.future.set_exception(DetectionError(response.message))
            else:
                task.future.set_result(response)

        if next_task is not None:
            worker.post_message(next_task.request)


def run_tasks_sync(
    requests: Iterable[WorkerRequest],
    on_progress: Optional[Callable[[int], None]] = None,
) -> List[WorkerSuccessResponse]:
    """Run ``requests`` one after the other on the calling thread.

    Mirrors the pool's contract: an ERROR response raises
    :class:`DetectionError`, and ``on_progress`` is called with the number of
    completed requests after each one.
    """

    responses: List[WorkerSuccessResponse] = []
    for completed, request in enumerate(requests, start=1):
        response = handle_request(request)
        if isinstance(response, WorkerErrorResponse):
            raise DetectionError(response.message)
        responses.append(response)
        if on_progress is not None:
            on_progress(completed)
    return responses
