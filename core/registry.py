"""
🗂️ Registry - État centralisé du bot

Construit et relie les composants: stores, BanService, MessageBus,
MessageHandler, NotificationHub, IRCClient.
Une seule instance par process, passée explicitement (pas de global).
"""
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Dict, List, Optional

from core.message_bus import MessageBus, TOPIC_SLOTBAN_EVENT
from core.message_handler import MessageHandler
from core.message_types import EventType, SlotBanEvent
from core.notification_hub import NotificationHub
from modules.moderation import BannedSlot, BanService, SettingsStore, SlotBanStore
from modules.moderation.slot_ban_store import utc_now
from twitchapi.auth_manager import AuthManager, TokenInfo
from twitchapi.transports.irc_client import IRCClient

LOGGER = logging.getLogger(__name__)


@dataclass
class Registry:
    """Composants du bot, reliés entre eux"""
    bus: MessageBus
    store: SlotBanStore
    settings: SettingsStore
    ban_service: BanService
    message_handler: MessageHandler
    hub: NotificationHub
    irc_client: IRCClient
    irc_task: Optional[asyncio.Task] = field(default=None, init=False, repr=False)

    @classmethod
    def build(
        cls,
        config: Optional[Dict[str, Any]] = None,
        token: Optional[TokenInfo] = None,
        auth: Optional[AuthManager] = None,
        clock=utc_now
    ) -> "Registry":
        """
        Args:
            config: Config YAML chargée (sections bans, timeouts, replies)
            token: Identifiants du bot (None = bot désactivé)
            auth: AuthManager (None = bot désactivé)
            clock: Horloge partagée par le store et le service
        """
        config = config or {}
        bans_config = config.get("bans", {})
        timeouts = config.get("timeouts", {})

        bus = MessageBus()
        store = SlotBanStore(clock=clock)
        settings = SettingsStore()
        ban_service = BanService(
            store,
            settings,
            ban_duration=timedelta(days=bans_config.get("duration_days", 10)),
            sweep_interval=bans_config.get("sweep_interval_hours", 24) * 3600,
            clock=clock
        )

        # Le hub s'abonne en premier: il reçoit tous les slotban.event
        hub = NotificationHub(bus)
        message_handler = MessageHandler(bus, ban_service, replies=config.get("replies"))
        irc_client = IRCClient(
            bus,
            token,
            auth,
            irc_send_timeout=timeouts.get("irc_send", 5.0),
            health_interval=timeouts.get("irc_health_check", 60.0)
        )

        async def publish_expired(expired_bans: List[BannedSlot]) -> None:
            await bus.publish(TOPIC_SLOTBAN_EVENT, SlotBanEvent(
                type=EventType.BAN_EXPIRED,
                data={"expiredBans": [slot.to_dict() for slot in expired_bans]}
            ))

        ban_service.set_expired_callback(publish_expired)

        LOGGER.info("🗂️ Registry construit")
        return cls(
            bus=bus,
            store=store,
            settings=settings,
            ban_service=ban_service,
            message_handler=message_handler,
            hub=hub,
            irc_client=irc_client,
        )

    async def start(self) -> None:
        """
        Lie le bus à la loop courante, démarre le sweep, puis lance la
        connexion Twitch en tâche de fond (l'API répond pendant le connect).
        """
        self.bus.bind_loop()
        await self.ban_service.start()
        self.irc_task = asyncio.create_task(self.irc_client.start())

    async def stop(self) -> None:
        """Arrête le bot (connect en cours compris) puis le sweep, et attend les events en vol"""
        if self.irc_task:
            if not self.irc_task.done():
                self.irc_task.cancel()
            try:
                await self.irc_task
            except asyncio.CancelledError:
                pass
            self.irc_task = None

        await self.irc_client.stop()
        await self.ban_service.stop()
        await self.bus.wait_all()
