from __future__ import annotations

from flask import request


def request_payload() -> dict:
    """Request body as a dict: JSON when sent as JSON, form fields otherwise."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()
