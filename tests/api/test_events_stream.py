from __future__ import annotations

import json

from tests.fakes import ADMIN


def _parse(chunk: bytes) -> tuple[str, dict]:
    lines = chunk.decode("utf-8").strip().splitlines()
    assert lines[0].startswith("event: ")
    assert lines[1].startswith("data: ")
    return lines[0][len("event: "):], json.loads(lines[1][len("data: "):])


def test_events_stream_receives_task_created(client, auth_headers, broadcaster):
    resp = client.get("/events")
    try:
        assert resp.status_code == 200
        assert resp.mimetype == "text/event-stream"
        assert resp.headers["Cache-Control"] == "no-cache"

        chunks = iter(resp.response)
        assert next(chunks) == b": connected\n\n"
        assert broadcaster.client_count == 1

        created = client.post("/create", json={"title": "t", "details": "d"}, headers=auth_headers(ADMIN))
        assert created.status_code == 200

        name, payload = _parse(next(chunks))
        assert name == "taskCreated"
        assert payload["id"] == created.get_json()["task"]["id"]
    finally:
        resp.close()

    assert broadcaster.client_count == 0


def test_events_stream_sends_keepalive_when_idle(client):
    resp = client.get("/events")
    try:
        chunks = iter(resp.response)
        next(chunks)
        assert next(chunks) == b": keep-alive\n\n"
    finally:
        resp.close()


def test_head_request_leaves_no_subscription(client, broadcaster):
    resp = client.head("/events")
    resp.close()

    assert resp.status_code == 200
    assert broadcaster.client_count == 0


def test_stream_closed_before_reading_leaves_no_subscription(client, broadcaster):
    client.get("/events").close()

    assert broadcaster.client_count == 0
