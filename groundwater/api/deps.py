"""
Request-scoped access to the shared ``MonitoringService``.
"""

from __future__ import annotations

from fastapi import Request

from groundwater.service import MonitoringService


def get_service(request: Request) -> MonitoringService:
    return request.app.state.service
