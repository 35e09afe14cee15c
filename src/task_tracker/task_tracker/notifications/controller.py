from __future__ import annotations

import queue

from flask import Flask, Response, stream_with_context

from ..container import Container
from .broadcaster import format_sse


def register(app: Flask, container: Container) -> None:
    keepalive = float(app.config.get("SSE_KEEPALIVE_SECONDS", 15))

    @app.route("/events", methods=["GET"], endpoint="events")
    def events():
        """Server-Sent Events stream of every change broadcast by the services."""

        def generate():
            # Subscribes only once the body is read; a HEAD never reads it.
            sub = container.broadcaster.subscribe()
            try:
                yield ": connected\n\n"
                while True:
                    try:
                        event = sub.get(timeout=keepalive)
                    except queue.Empty:
                        yield ": keep-alive\n\n"
                        continue
                    yield format_sse(event)
            finally:
                container.broadcaster.unsubscribe(sub)

        return Response(
            stream_with_context(generate()),
            mimetype="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "X-Accel-Buffering": "no",
            },
        )
