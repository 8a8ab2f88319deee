from __future__ import annotations

import threading

from page_factory import render_page

from scoresplit.layout import Boundary
from scoresplit.workers import (
    DetectStaffsRequest,
    DetectStaffsResponse,
    DetectSystemsRequest,
    DetectSystemsResponse,
    ThreadWorker,
    WorkerErrorResponse,
    handle_request,
)


def _systems_request(task_id: str = "t1") -> DetectSystemsRequest:
    image = render_page()
    return DetectSystemsRequest(
        task_id=task_id,
        page_index=3,
        rgba_data=image.tobytes(),
        width=image.shape[1],
        height=image.shape[0],
        system_gap_height=50,
    )


def test_handle_systems_request():
    response = handle_request(_systems_request())

    assert isinstance(response, DetectSystemsResponse)
    assert response.task_id == "t1"
    assert response.page_index == 3
    assert response.systems == (Boundary(0, 200), Boundary(300, 600))


def test_handle_staffs_request_groups_staves_per_system():
    image = render_page()
    request = DetectStaffsRequest(
        task_id="t2",
        page_index=0,
        rgba_data=image.tobytes(),
        width=image.shape[1],
        height=image.shape[0],
        system_boundaries=(Boundary(0, 200), Boundary(300, 600)),
        part_gap_height=15,
    )

    response = handle_request(request)

    assert isinstance(response, DetectStaffsResponse)
    assert response.staffs_by_system == (
        (Boundary(50, 150), Boundary(150, 200)),
        (Boundary(300, 350), Boundary(350, 500)),
    )


def test_handle_request_reports_failures_as_error_response():
    request = DetectSystemsRequest(
        task_id="broken",
        page_index=0,
        rgba_data=b"\x00" * 7,
        width=10,
        height=10,
        system_gap_height=50,
    )

    response = handle_request(request)

    assert isinstance(response, WorkerErrorResponse)
    assert response.task_id == "broken"
    assert "expected 400" in response.message


def test_thread_worker_posts_responses_to_listener():
    received = []
    done = threading.Event()
    worker = ThreadWorker()
    worker.on_message = lambda response: (received.append(response), done.set())

    worker.post_message(_systems_request("threaded"))

    assert done.wait(timeout=5)
    worker.terminate()
    assert received[0].task_id == "threaded"
