"""Utility functions for the API: service lookups for route dependencies."""

from fastapi import Request, WebSocket

from .config import Settings
from .services import BroadcastChannel, CheckerService, RealtimePipeline


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_checker(request: Request) -> CheckerService:
    return request.app.state.checker


def get_pipeline(request: Request) -> RealtimePipeline:
    return request.app.state.pipeline


def ws_pipeline(websocket: WebSocket) -> RealtimePipeline:
    return websocket.app.state.pipeline


def ws_channel(websocket: WebSocket) -> BroadcastChannel:
    return websocket.app.state.channel
