#!/usr/bin/env python3
"""
IRC Client - Chat Twitch du bot slot-ban
- Écoute chat IRC → Publie sur chat.inbound
- Écoute chat.outbound → Envoie via IRC (avec timeout)
- Suivi de la connexion → Publie BOT_STATUS sur slotban.event

La reconnexion est entièrement déléguée à pyTwitchAPI: aucun retry ici.
"""

import asyncio
import logging
from typing import Optional

from twitchAPI.twitch import Twitch
from twitchAPI.chat import Chat, ChatMessage as TwitchChatMessage, EventData
from twitchAPI.type import ChatEvent

from core.message_bus import MessageBus, TOPIC_CHAT_INBOUND, TOPIC_CHAT_OUTBOUND, TOPIC_SLOTBAN_EVENT
from core.message_types import ChatMessage, EventType, OutboundMessage, SlotBanEvent
from twitchapi.auth_manager import AuthManager, TokenInfo

LOGGER = logging.getLogger(__name__)


class IRCClient:
    """
    Client IRC Twitch (Bidirectionnel)
    - Rejoint les channels
    - Écoute les messages → chat.inbound
    - Envoie les messages ← chat.outbound
    """

    def __init__(
        self,
        bus: MessageBus,
        token: Optional[TokenInfo],
        auth: Optional[AuthManager],
        irc_send_timeout: float = 5.0,
        health_interval: float = 60.0
    ):
        """
        Args:
            bus: MessageBus pour publier
            token: Identifiants du bot (None = pas de connexion)
            auth: AuthManager pour créer l'instance Twitch
            irc_send_timeout: Timeout envoi IRC en secondes
            health_interval: Intervalle du health check en secondes
        """
        self.bus = bus
        self.token = token
        self.auth = auth
        self.irc_send_timeout = irc_send_timeout
        self.health_interval = health_interval

        self.twitch: Optional[Twitch] = None
        self.chat: Optional[Chat] = None
        self._running = False
        self._connected = False
        self._health_task: Optional[asyncio.Task] = None

        self.bus.subscribe(TOPIC_CHAT_OUTBOUND, self._handle_outbound_message)

        channels = token.channels if token else []
        LOGGER.info(f"IRCClient init sur {len(channels)} channels (timeout={irc_send_timeout}s)")

    @property
    def bot_login(self) -> str:
        return self.token.user_login if self.token else ""

    async def start(self) -> None:
        """Démarre le client IRC"""
        if self._running:
            LOGGER.warning("IRC Client déjà en cours")
            return

        if self.token is None or self.auth is None:
            LOGGER.warning("⚠️ Twitch credentials not provided. Bot will not connect.")
            await self._set_connected(False, force=True)
            return

        LOGGER.info("🚀 Démarrage IRC Client...")

        try:
            self.twitch = await self.auth.create_bot_twitch(self.token)
            # Callbacks chat sur la loop de l'app, pas sur la loop du thread socket
            self.chat = await Chat(
                self.twitch,
                initial_channel=self.token.channels,
                callback_loop=asyncio.get_running_loop()
            )

            self.chat.register_event(ChatEvent.READY, self._on_ready)
            self.chat.register_event(ChatEvent.MESSAGE, self._on_message)

            self.chat.start()
            self._running = True

            self._health_task = asyncio.create_task(self._health_loop())

            LOGGER.info("✅ IRC Client démarré")

        except Exception as e:
            LOGGER.error(f"❌ Failed to connect to Twitch: {e}", exc_info=True)
            await self._set_connected(False, force=True)

    async def stop(self) -> None:
        """Arrête le client IRC proprement"""
        if self._health_task:
            self._health_task.cancel()
            try:
                await self._health_task
            except asyncio.CancelledError:
                pass
            self._health_task = None

        if self.chat:
            self.chat.stop()
            self.chat = None

        if self.twitch:
            await self.twitch.close()
            self.twitch = None

        if self._running:
            self._running = False
            LOGGER.info("✅ IRC Client arrêté")

        self._connected = False

    async def _on_ready(self, ready_event: EventData) -> None:
        """Callback quand IRC est ready (channels rejoints via initial_channel)"""
        LOGGER.info("📡 Connected to Twitch chat")
        await self._set_connected(True)

    async def _on_message(self, msg: TwitchChatMessage) -> None:
        """
        Callback quand un message IRC arrive
        → Publie sur MessageBus (topic: chat.inbound)
        """
        chat_msg = self.to_chat_message(msg)
        LOGGER.debug(f"📥 IRC | {chat_msg.user_login} dans #{chat_msg.channel}: {chat_msg.text[:100]!r}")

        try:
            await self.bus.publish(TOPIC_CHAT_INBOUND, chat_msg)
        except Exception as e:
            LOGGER.error(f"❌ Erreur publish chat.inbound: {e}")

    def to_chat_message(self, msg: TwitchChatMessage) -> ChatMessage:
        """Convertit un message pyTwitchAPI en ChatMessage interne"""
        badges = msg.user.badges or {}
        is_broadcaster = "broadcaster" in badges or (
            msg.room is not None and msg.room.room_id == msg.user.id
        )

        return ChatMessage(
            channel=msg.room.name if msg.room else "",
            channel_id=msg.room.room_id if msg.room else "",
            user_login=msg.user.name or msg.user.display_name or "Unknown",
            user_id=msg.user.id,
            text=msg.text,
            is_mod=bool(msg.user.mod) or "moderator" in badges,
            is_broadcaster=is_broadcaster,
            is_echo=(msg.user.name or "").lower() == self.bot_login,
            transport="irc",
            badges=badges
        )

    async def _handle_outbound_message(self, msg: OutboundMessage) -> None:
        """
        Envoie un message via IRC avec timeout.
        Ignoré si le bot n'est pas connecté.
        """
        if not self.chat or not self._connected:
            LOGGER.warning(f"⚠️ IRC non prêt, message ignoré: {msg.text[:50]}")
            return

        try:
            await asyncio.wait_for(
                self.chat.send_message(msg.channel, msg.text),
                timeout=self.irc_send_timeout
            )
            LOGGER.info(f"✅ Sent to #{msg.channel}: {msg.text[:50]}")

        except asyncio.TimeoutError:
            LOGGER.error(f"⏱️ Timeout envoi IRC à #{msg.channel} après {self.irc_send_timeout}s: {msg.text[:50]}")
        except Exception as e:
            LOGGER.error(f"❌ Erreur envoi IRC à #{msg.channel}: {e}", exc_info=True)

    async def _health_loop(self) -> None:
        """
        Surveille is_connected() de pyTwitchAPI pour détecter les déconnexions
        (pyTwitchAPI n'expose pas d'event "disconnected").
        """
        while self._running:
            await asyncio.sleep(self.health_interval)
            try:
                await self.check_connection()
            except Exception as e:
                LOGGER.error(f"❌ Erreur health check IRC: {e}")

    async def check_connection(self) -> bool:
        """Synchronise l'état connecté avec pyTwitchAPI"""
        connected = bool(self.chat and self.chat.is_connected())
        await self._set_connected(connected)
        return connected

    async def _set_connected(self, connected: bool, force: bool = False) -> None:
        """Met à jour l'état et publie BOT_STATUS sur changement"""
        if connected == self._connected and not force:
            return

        self._connected = connected
        if not connected:
            LOGGER.warning("🔌 Disconnected from Twitch chat")

        await self.bus.publish(TOPIC_SLOTBAN_EVENT, SlotBanEvent(
            type=EventType.BOT_STATUS,
            data={"connected": connected}
        ))

    def is_connected(self) -> bool:
        """Retourne True si le bot est connecté au chat"""
        return self._connected

    def is_running(self) -> bool:
        return self._running

    def get_channels(self) -> list[str]:
        return list(self.token.channels) if self.token else []
