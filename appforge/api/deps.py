from fastapi import Request

from appforge.core.services import AppServices


def get_services(request: Request) -> AppServices:
    """Service container attached to the app at startup"""
    return request.app.state.services
