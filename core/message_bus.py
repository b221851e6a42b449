"""
🚌 MessageBus - Pub/sub interne du bot slot-ban

Relie les trois flux du process:
- chat.inbound   : ChatMessage (transport → commandes)
- chat.outbound  : OutboundMessage (commandes → transport)
- slotban.event  : SlotBanEvent (HTTP, chat, sweep, transport → fan-out)

Les handlers tournent en tasks fire-and-forget sur la loop du bus.
Une fois bind_loop() appelé, un publish venu d'une autre loop (callbacks
d'une lib réseau dans son propre thread) est rapatrié sur la loop du bus:
stores et WebSockets ne sont touchés que depuis un seul thread.
"""
import asyncio
import logging
from collections import Counter, defaultdict
from typing import Any, Callable, Dict, List, Optional, Set

LOGGER = logging.getLogger(__name__)

TOPIC_CHAT_INBOUND = "chat.inbound"
TOPIC_CHAT_OUTBOUND = "chat.outbound"
TOPIC_SLOTBAN_EVENT = "slotban.event"

TOPICS = (TOPIC_CHAT_INBOUND, TOPIC_CHAT_OUTBOUND, TOPIC_SLOTBAN_EVENT)


class MessageBus:
    """Bus pub/sub mono-loop pour chat et événements slot-ban"""

    def __init__(self):
        self._handlers: Dict[str, List[Callable]] = defaultdict(list)
        self._pending: Set[asyncio.Task] = set()
        self._published: Counter = Counter()
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def bind_loop(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """Fixe la loop propriétaire (défaut: la loop courante)."""
        self._loop = loop or asyncio.get_running_loop()
        LOGGER.debug("🔗 MessageBus lié à la loop de l'application")

    def subscribe(self, topic: str, handler: Callable) -> None:
        """
        Abonne un handler async à un topic connu.

        Raises:
            ValueError: topic hors de TOPICS
        """
        if topic not in TOPICS:
            raise ValueError(f"Unknown topic: {topic}")
        self._handlers[topic].append(handler)
        LOGGER.info(f"📌 Subscriber ajouté: {topic} -> {handler.__name__}")

    async def publish(self, topic: str, data: Any) -> None:
        """Publie sur un topic sans attendre les handlers."""
        if self._loop is not None and asyncio.get_running_loop() is not self._loop:
            LOGGER.debug(f"🔀 Publish [{topic}] depuis une loop étrangère, rapatrié")
            self._loop.call_soon_threadsafe(self._dispatch, topic, data)
            return
        self._dispatch(topic, data)

    def _dispatch(self, topic: str, data: Any) -> None:
        self._published[topic] += 1
        handlers = self._handlers.get(topic)
        if not handlers:
            LOGGER.debug(f"⚠️ Aucun subscriber pour {topic}")
            return

        for handler in handlers:
            task = asyncio.create_task(self._run_handler(handler, topic, data))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

    async def _run_handler(self, handler: Callable, topic: str, data: Any) -> None:
        try:
            await handler(data)
        except Exception as e:
            LOGGER.error(f"❌ Erreur handler {handler.__name__} sur {topic}: {e}", exc_info=True)

    async def wait_all(self) -> None:
        """Attend les handlers en vol, y compris ceux qu'ils déclenchent."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def get_stats(self) -> Dict[str, Any]:
        return {
            "subscribers": {topic: len(h) for topic, h in self._handlers.items()},
            "published": dict(self._published),
            "active_tasks": len(self._pending),
        }
