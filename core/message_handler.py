#!/usr/bin/env python3
"""
Message Handler
Parse les commandes slot-ban du chat et publie les réponses sur MessageBus
"""
import logging
from typing import Dict, Optional

from core.message_bus import MessageBus, TOPIC_CHAT_INBOUND
from core.message_types import ChatMessage
from modules.classic_commands.slot_ban_commands import (
    DEFAULT_REPLIES,
    handle_ban,
    handle_banlist,
    handle_unban,
)
from modules.moderation import BanService

LOGGER = logging.getLogger(__name__)

BAN_PREFIX = "!ban "
BANLIST_COMMAND = "!banlist"
UNBAN_PREFIX = "!unban "


class MessageHandler:
    """
    Handler pour les commandes chat

    Aucun état propre: chaque ligne est traitée indépendamment.

    Traite les commandes:
    - !ban <slot>: Bannit un slot (si requests ouvertes)
    - !banlist: Liste des slots bannis
    - !unban <slot>: Retire un slot (mod/broadcaster)
    """

    def __init__(
        self,
        bus: MessageBus,
        ban_service: BanService,
        replies: Optional[Dict[str, str]] = None
    ):
        """
        Args:
            bus: MessageBus pour subscribe/publish
            ban_service: Service des slot bans (unique chemin de mutation)
            replies: Surcharge des textes de réponse (config.yaml > replies)
        """
        self.bus = bus
        self.ban_service = ban_service
        self.replies = {**DEFAULT_REPLIES, **(replies or {})}

        self.bus.subscribe(TOPIC_CHAT_INBOUND, self._handle_chat_message)

        LOGGER.info("MessageHandler initialisé")

    async def _handle_chat_message(self, msg: ChatMessage) -> None:
        """
        Traite un message chat entrant.

        Les erreurs sont loggées: une commande ratée ne doit pas casser le flux.
        """
        try:
            await self.handle_message(msg)
        except Exception as e:
            LOGGER.error(f"❌ Erreur commande '{msg.text[:50]}' de {msg.user_login}: {e}", exc_info=True)

    async def handle_message(self, msg: ChatMessage) -> None:
        """Route une ligne de chat vers la commande correspondante."""
        if msg.is_echo:
            return

        text = (msg.text or "").strip()
        lowered = text.lower()

        if lowered.startswith(BAN_PREFIX):
            slot_name = text[len(BAN_PREFIX):].strip()
            if slot_name:
                LOGGER.info(f"🤖 Command: !ban from {msg.user_login} in #{msg.channel}")
                await handle_ban(self, msg, slot_name)

        elif lowered == BANLIST_COMMAND:
            LOGGER.info(f"🤖 Command: !banlist from {msg.user_login} in #{msg.channel}")
            await handle_banlist(self, msg)

        elif lowered.startswith(UNBAN_PREFIX) and msg.is_privileged:
            slot_name = text[len(UNBAN_PREFIX):].strip()
            if slot_name:
                LOGGER.info(f"🤖 Command: !unban from {msg.user_login} in #{msg.channel}")
                await handle_unban(self, msg, slot_name)
