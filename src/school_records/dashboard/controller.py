from __future__ import annotations

from flask import Flask

from ..common.access import roles_required
from ..common.http import ok
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    @app.route("/api/dashboard/stats", methods=["GET"], endpoint="dashboard_stats")
    @roles_required(Role.ADMIN)
    def dashboard_stats():
        return ok(container.dashboard_service.stats())
