"""Run system and staff detection over a whole document.

Pages are processed by a :class:`WorkerPool` when child processes are
available and inline otherwise.  Either way results are matched back to pages
through ``page_index``; completion order does not matter.
"""
from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Sequence

from ..config import DetectionConfig
from ..io.ingest import RasterPage
from ..layout.coordinates import canvas_y_to_pdf_y, pdf_y_to_canvas_y
from ..layout.model import IdFactory, Layout, Staff, System, get_page_systems, new_id
from ..layout.projection_analysis import Boundary
from .detection_worker import is_worker_available
from .pool import WorkerFactory, WorkerPool, default_pool_size, run_tasks_sync
from .protocol import (
    DetectStaffsRequest,
    DetectSystemsRequest,
    WorkerRequest,
    WorkerSuccessResponse,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


def _dispatch(
    requests: Sequence[WorkerRequest],
    config: DetectionConfig,
    on_progress: Optional[ProgressCallback],
    worker_factory: Optional[WorkerFactory],
) -> Dict[int, WorkerSuccessResponse]:
    total = len(requests)
    if not requests:
        return {}

    use_pool = config.use_workers and (worker_factory is not None or is_worker_available())
    if not use_pool:
        logger.info("Running detection inline for %d pages", total)
        responses = run_tasks_sync(
            requests,
            on_progress=(lambda completed: on_progress(completed, total)) if on_progress else None,
        )
        return {response.page_index: response for response in responses}

    pool_size = min(config.pool_size or default_pool_size(), total)
    logger.info("Dispatching detection for %d pages to worker pool", total)
    with WorkerPool(pool_size=pool_size, worker_factory=worker_factory) as pool:
        futures = [pool.submit_task(request) for request in requests]
        results: Dict[int, WorkerSuccessResponse] = {}
        for completed, future in enumerate(futures, start=1):
            response = future.result()
            results[response.page_index] = response
            if on_progress is not None:
                on_progress(completed, total)
    return results


def _to_pixel_span(system: System, page: RasterPage) -> Boundary:
    top_px = round(pdf_y_to_canvas_y(system.top, page.page_height, page.scale))
    bottom_px = round(pdf_y_to_canvas_y(system.bottom, page.page_height, page.scale))
    top_px = min(max(top_px, 0), page.height)
    bottom_px = min(max(bottom_px, top_px), page.height)
    return Boundary(top_px=top_px, bottom_px=bottom_px)


def detect_systems(
    pages: Sequence[RasterPage],
    config: DetectionConfig | None = None,
    *,
    on_progress: Optional[ProgressCallback] = None,
    id_factory: IdFactory = new_id,
    worker_factory: Optional[WorkerFactory] = None,
) -> List[System]:
    """Detect the systems of every page and return them as :class:`System` entities."""

    config = config or DetectionConfig()
    requests = [
        DetectSystemsRequest(
            task_id=f"systems-{page.page_index}-{id_factory()}",
            page_index=page.page_index,
            rgba_data=page.rgba_bytes(),
            width=page.width,
            height=page.height,
            system_gap_height=config.system_gap_height,
            low_threshold_fraction=config.low_threshold_fraction,
            binary_threshold=config.binary_threshold,
        )
        for page in pages
    ]
    results = _dispatch(requests, config, on_progress, worker_factory)

    systems: List[System] = []
    for page in pages:
        response = results[page.page_index]
        for boundary in response.systems:
            systems.append(
                System(
                    id=id_factory(),
                    page_index=page.page_index,
                    top=canvas_y_to_pdf_y(boundary.top_px, page.page_height, page.scale),
                    bottom=canvas_y_to_pdf_y(boundary.bottom_px, page.page_height, page.scale),
                )
            )
    return systems


def detect_staffs(
    pages: Sequence[RasterPage],
    systems: Sequence[System],
    config: DetectionConfig | None = None,
    *,
    on_progress: Optional[ProgressCallback] = None,
    id_factory: IdFactory = new_id,
    worker_factory: Optional[WorkerFactory] = None,
) -> List[Staff]:
    """Detect the staves inside every system; each staff references its system."""

    config = config or DetectionConfig()
    page_systems = {page.page_index: get_page_systems(systems, page.page_index) for page in pages}
    requests = [
        DetectStaffsRequest(
            task_id=f"staffs-{page.page_index}-{id_factory()}",
            page_index=page.page_index,
            rgba_data=page.rgba_bytes(),
            width=page.width,
            height=page.height,
            system_boundaries=tuple(_to_pixel_span(system, page) for system in page_systems[page.page_index]),
            part_gap_height=config.part_gap_height,
            low_threshold_fraction=config.low_threshold_fraction,
            binary_threshold=config.binary_threshold,
        )
        for page in pages
        if page_systems[page.page_index]
    ]
    results = _dispatch(requests, config, on_progress, worker_factory)

    staffs: List[Staff] = []
    for page in pages:
        response = results.get(page.page_index)
        if response is None:
            continue
        for system, boundaries in zip(page_systems[page.page_index], response.staffs_by_system):
            for boundary in boundaries:
                staffs.append(
                    Staff(
                        id=id_factory(),
                        page_index=page.page_index,
                        top=canvas_y_to_pdf_y(boundary.top_px, page.page_height, page.scale),
                        bottom=canvas_y_to_pdf_y(boundary.bottom_px, page.page_height, page.scale),
                        label="",
                        system_id=system.id,
                    )
                )
    return staffs


def detect_layout(
    pages: Sequence[RasterPage],
    config: DetectionConfig | None = None,
    *,
    on_progress: Optional[ProgressCallback] = None,
    id_factory: IdFactory = new_id,
    worker_factory: Optional[WorkerFactory] = None,
) -> Layout:
    """Detect systems, then the staves inside them, for every page."""

    systems = detect_systems(
        pages, config, on_progress=on_progress, id_factory=id_factory, worker_factory=worker_factory
    )
    staffs = detect_staffs(
        pages, systems, config, on_progress=on_progress, id_factory=id_factory, worker_factory=worker_factory
    )
    return Layout(staffs=tuple(staffs), systems=tuple(systems))
