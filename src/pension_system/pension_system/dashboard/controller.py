from __future__ import annotations

from flask import Flask, jsonify

from ..common.guards import build_guards
from ..core.enums import Role
from ..container import Container
from ..users.serializers import flagged_manager


def register(app: Flask, container: Container) -> None:
    _, roles_required = build_guards(container.auth_service)

    @app.route("/api/admin/stats", methods=["GET"], endpoint="admin_stats")
    @roles_required(Role.ADMIN)
    def admin_stats():
        return jsonify(container.dashboard_service.admin_stats())

    @app.route("/api/admin/flagged-managers", methods=["GET"], endpoint="admin_flagged_managers")
    @roles_required(Role.ADMIN)
    def admin_flagged_managers():
        return jsonify([flagged_manager(u) for u in container.dashboard_service.flagged_managers()])
