from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import request_payload
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/", methods=["POST"], endpoint="login")
    def login():
        data = request_payload()
        token = container.auth_service.login(data.get("email"), data.get("password"))
        return jsonify({"message": "Login success!", "token": token})

    @app.route("/register", methods=["POST"], endpoint="register")
    def register_account():
        data = request_payload()
        container.auth_service.register(data.get("name"), data.get("email"), data.get("password"))
        return jsonify({"message": "Registered! Please login."})

    @app.route("/forgot", methods=["POST"], endpoint="forgot")
    def forgot():
        data = request_payload()
        container.auth_service.reset_password(data.get("email"), data.get("newPassword"))
        return jsonify({"message": "Password updated successfully. Please login with your new password."})
