from __future__ import annotations

import logging

from flask import Flask, jsonify

from ..common.datetime_utils import isoformat_or_none
from ..container import Container
from ..core.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        try:
            if container.conn is None:
                raise StoreUnavailableError("Database not configured")
            now = container.conn.ping()
        except StoreUnavailableError:
            logger.warning("Health check: database unavailable")
            return jsonify({"status": "error", "database": "disconnected", "error": "Database unavailable"}), 503
        return jsonify({"status": "ok", "database": "connected", "timestamp": isoformat_or_none(now)})
