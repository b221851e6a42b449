"""
Core - Utilitaires transverses (bus, DTOs, handler, fan-out)
"""

from core.message_bus import MessageBus
from core.message_types import ChatMessage, EventType, OutboundMessage, SlotBanEvent

__all__ = ["MessageBus", "ChatMessage", "EventType", "OutboundMessage", "SlotBanEvent"]
