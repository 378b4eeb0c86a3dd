from __future__ import annotations

from fastapi import Request

from universe.settings import Settings


def app_settings(request: Request) -> Settings:
    return request.app.state.settings
