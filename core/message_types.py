"""
📦 Message Types - DTOs pour le système de messaging

Contrats de données entre transports, logique métier et dashboard.
"""
import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Any


@dataclass
class ChatMessage:
    """Message entrant (chat IRC Twitch)"""
    channel: str                    # Nom du channel (sans #)
    channel_id: str                 # ID Twitch du broadcaster
    user_login: str                 # Login de l'utilisateur
    user_id: str                    # ID Twitch de l'utilisateur
    text: str                       # Contenu du message
    is_mod: bool = False            # Est modérateur
    is_broadcaster: bool = False    # Est le broadcaster
    is_echo: bool = False           # Message envoyé par le bot lui-même
    transport: str = "unknown"      # Source: "irc", "test"
    badges: Dict[str, str] = field(default_factory=dict)  # Badges Twitch

    @property
    def is_privileged(self) -> bool:
        return self.is_mod or self.is_broadcaster


@dataclass
class OutboundMessage:
    """Message sortant (à envoyer dans le chat)"""
    channel: str                    # Nom du channel (sans #)
    text: str                       # Contenu du message
    meta: Dict[str, Any] = field(default_factory=dict)


class EventType(str, Enum):
    """Tags des événements poussés au dashboard / overlay"""
    BAN_ADDED = "BAN_ADDED"
    BAN_REMOVED = "BAN_REMOVED"
    BAN_EXPIRED = "BAN_EXPIRED"
    STATUS_CHANGED = "STATUS_CHANGED"
    BOT_STATUS = "BOT_STATUS"


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if hasattr(value, "to_dict"):
        return value.to_dict()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


@dataclass
class SlotBanEvent:
    """
    Événement de changement d'état (topic: slotban.event).

    Le payload varie selon le tag, seul `type` est commun:
    - BAN_ADDED: slot complet
    - BAN_REMOVED: {id} | {id, slotName, removedBy} | {clearAll}
    - BAN_EXPIRED: {expiredBans: [...]}
    - STATUS_CHANGED: {requestsOpen}
    - BOT_STATUS: {connected}
    """
    type: EventType
    data: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "data": self.data}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=_json_default)
