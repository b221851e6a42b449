#!/usr/bin/env python3
"""
Dépendances FastAPI partagées
"""

from fastapi import Request, WebSocket

from core.registry import Registry


def get_registry(request: Request) -> Registry:
    """Registry attaché à l'app (app.state.registry)."""
    return request.app.state.registry


def get_ws_registry(websocket: WebSocket) -> Registry:
    return websocket.app.state.registry
