from __future__ import annotations

import pytest

from page_factory import make_page, render_page

from scoresplit.config import DetectionConfig
from scoresplit.layout import Boundary
from scoresplit.workers import (
    DetectSystemsRequest,
    ProcessWorker,
    WorkerPool,
    detect_layout,
    is_worker_available,
)

pytestmark = pytest.mark.skipif(not is_worker_available(), reason="child processes are not available")


def _shape(layout):
    return sorted((staff.page_index, round(staff.top, 3), round(staff.bottom, 3)) for staff in layout.staffs)


def test_process_pool_runs_detection_in_child_processes():
    image = render_page()
    requests = [
        DetectSystemsRequest(
            task_id=f"proc-{index}",
            page_index=index,
            rgba_data=image.tobytes(),
            width=image.shape[1],
            height=image.shape[0],
            system_gap_height=50,
        )
        for index in range(3)
    ]

    with WorkerPool(pool_size=2, worker_factory=ProcessWorker) as pool:
        futures = [pool.submit_task(request) for request in requests]
        responses = [future.result(timeout=60) for future in futures]

    assert [response.page_index for response in responses] == [0, 1, 2]
    assert all(response.systems == (Boundary(0, 200), Boundary(300, 600)) for response in responses)


def test_default_config_matches_inline_detection():
    pages = [make_page(0), make_page(1)]

    pooled = detect_layout(pages, DetectionConfig())
    inline = detect_layout(pages, DetectionConfig(use_workers=False))

    assert len(pooled.staffs) == 8
    assert _shape(pooled) == _shape(inline)
