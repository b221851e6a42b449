"""
📣 NotificationHub - Fan-out WebSocket vers dashboard / overlay

Garde l'ensemble des WebSockets connectés et leur pousse chaque
SlotBanEvent publié sur le topic slotban.event.

Un client pas prêt est sauté (pas de queue, pas de retry).
Un client en erreur est retiré, sans jamais faire échouer le broadcast.
"""
import logging
from typing import Any, Dict, Set

from starlette.websockets import WebSocketState

from core.message_bus import MessageBus, TOPIC_SLOTBAN_EVENT
from core.message_types import SlotBanEvent

LOGGER = logging.getLogger(__name__)


def _is_open(ws: Any) -> bool:
    return (
        getattr(ws, "client_state", None) == WebSocketState.CONNECTED
        and getattr(ws, "application_state", None) == WebSocketState.CONNECTED
    )


class NotificationHub:
    """Ensemble des subscribers WebSocket"""

    def __init__(self, bus: MessageBus):
        self.bus = bus
        self._subscribers: Set[Any] = set()

        self.bus.subscribe(TOPIC_SLOTBAN_EVENT, self.broadcast)

    async def connect(self, ws: Any) -> None:
        """Accepte le WebSocket et l'ajoute aux subscribers"""
        # Ajouté avant le handshake: _is_open() le saute jusqu'à accept()
        self._subscribers.add(ws)
        try:
            await ws.accept()
        except Exception:
            self._subscribers.discard(ws)
            raise
        LOGGER.info(f"🔌 WebSocket client connected ({len(self._subscribers)} total)")

    def disconnect(self, ws: Any) -> None:
        """Retire un subscriber (no-op s'il est déjà parti)"""
        if ws in self._subscribers:
            self._subscribers.discard(ws)
            LOGGER.info(f"🔌 WebSocket client disconnected ({len(self._subscribers)} total)")

    async def broadcast(self, event: SlotBanEvent) -> int:
        """
        Envoie l'événement à tous les subscribers ouverts.

        Returns:
            Nombre de clients effectivement notifiés
        """
        payload = event.to_json()
        sent = 0

        for ws in list(self._subscribers):
            if not _is_open(ws):
                continue
            try:
                await ws.send_text(payload)
                sent += 1
            except Exception as e:
                LOGGER.error(f"❌ WebSocket error, client retiré: {e}")
                self.disconnect(ws)

        LOGGER.debug(f"📣 {event.type.value} → {sent}/{len(self._subscribers)} clients")
        return sent

    def get_stats(self) -> Dict[str, int]:
        return {"subscribers": len(self._subscribers)}
