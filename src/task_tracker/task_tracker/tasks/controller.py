from __future__ import annotations

from flask import Flask, jsonify

from ..auth.middleware import current_principal, require_auth
from ..common.http import request_payload
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    tokens = container.tokens
    tasks = container.task_service

    @app.route("/api/tasks", methods=["GET"], endpoint="api_tasks")
    @require_auth(tokens, Role.ADMIN, Role.DEVELOPER)
    def api_tasks():
        return jsonify([t.to_public() for t in tasks.list_tasks()])

    @app.route("/api/task/<int:task_id>", methods=["GET"], endpoint="api_task_get")
    @require_auth(tokens)
    def api_task_get(task_id: int):
        return jsonify(tasks.get_task(task_id).to_public())

    @app.route("/create", methods=["POST"], endpoint="create_task")
    @require_auth(tokens, Role.ADMIN)
    def create_task():
        data = request_payload()
        task = tasks.create_task(
            current_principal(),
            title=data.get("title"),
            details=data.get("details"),
            status=data.get("status"),
            priority=data.get("priority"),
            assignee_email=data.get("assigneeEmail"),
            due_date=data.get("dueDate"),
        )
        return jsonify({"message": "Task created!", "task": task.to_public()})

    @app.route("/api/task/<int:task_id>", methods=["PUT"], endpoint="api_task_update")
    @require_auth(tokens, Role.ADMIN)
    def api_task_update(task_id: int):
        data = request_payload()
        task = tasks.update_task(
            task_id,
            title=data.get("title"),
            details=data.get("details"),
            status=data.get("status"),
            priority=data.get("priority"),
            assignee_email=data.get("assigneeEmail"),
            due_date=data.get("dueDate"),
        )
        return jsonify({"message": "Task updated!", "task": task.to_public()})

    @app.route("/api/task/<int:task_id>/assign", methods=["PUT"], endpoint="api_task_assign")
    @require_auth(tokens, Role.ADMIN)
    def api_task_assign(task_id: int):
        task = tasks.assign_task(task_id, request_payload().get("assigneeEmail"))
        return jsonify({"message": "Task assigned successfully", "task": task.to_public()})

    @app.route("/api/task/<int:task_id>/status", methods=["PUT"], endpoint="api_task_status")
    @require_auth(tokens)
    def api_task_status(task_id: int):
        task = tasks.change_status(current_principal(), task_id, request_payload().get("status"))
        return jsonify({"message": "Task status updated", "task": task.to_public()})

    @app.route("/api/task/<int:task_id>", methods=["DELETE"], endpoint="api_task_delete")
    @require_auth(tokens, Role.ADMIN)
    def api_task_delete(task_id: int):
        tasks.delete_task(task_id)
        return jsonify({"message": "Task deleted!"})

    @app.route("/api/cleanup-tasks", methods=["POST"], endpoint="api_cleanup_tasks")
    @require_auth(tokens, Role.ADMIN)
    def api_cleanup_tasks():
        deleted = container.cleanup_service.run()
        return jsonify({"message": "Cleanup completed", "deletedCount": deleted})
