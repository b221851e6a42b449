#!/usr/bin/env python3
"""
WebSocket /ws - Push serveur → dashboard / overlay

Aucun message client → serveur n'est défini: toute frame reçue (texte ou
binaire) est ignorée, seule la déconnexion termine la boucle.
"""

import logging

from fastapi import APIRouter, Depends, WebSocket

from core.registry import Registry
from web.backend.dependencies import get_ws_registry

logger = logging.getLogger(__name__)
router = APIRouter()


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket, registry: Registry = Depends(get_ws_registry)):
    hub = registry.hub
    await hub.connect(websocket)

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    except Exception as e:
        logger.error(f"WebSocket error: {e}")
    finally:
        hub.disconnect(websocket)
