#!/usr/bin/env python3
"""
🚫 Ban Service - Règles métier des slot bans

- Un seul ban actif par nom de slot (case-insensitive)
- Expiration automatique après 10 jours
- Sweep périodique (toutes les 24h) des bans expirés
- Toggle global "requests ouvertes / fermées"

Le sweep tourne dans une task asyncio: start() la lance, stop() l'annule
et l'attend (aucune task ne survit à stop()).
"""

import asyncio
import inspect
import logging
from datetime import datetime, timedelta
from typing import Awaitable, Callable, List, Optional, Union

from modules.moderation.settings_store import REQUESTS_OPEN, SettingsStore
from modules.moderation.slot_ban_store import BannedSlot, SlotBanStore, utc_now

LOGGER = logging.getLogger(__name__)

DEFAULT_BAN_DURATION = timedelta(days=10)
DEFAULT_SWEEP_INTERVAL = 24 * 60 * 60  # 24h en secondes

ExpiredCallback = Callable[[List[BannedSlot]], Union[None, Awaitable[None]]]


class BanService:
    """
    Orchestration du SlotBanStore et du SettingsStore.

    Le service ne garde aucune copie des bans: tout passe par les stores.
    """

    def __init__(
        self,
        store: SlotBanStore,
        settings: SettingsStore,
        ban_duration: timedelta = DEFAULT_BAN_DURATION,
        sweep_interval: float = DEFAULT_SWEEP_INTERVAL,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Args:
            store: Store des slots bannis
            settings: Store des paramètres (requests_open)
            ban_duration: Durée d'un ban (défaut: 10 jours)
            sweep_interval: Intervalle du sweep en secondes (défaut: 24h)
            clock: Horloge (injectable pour les tests)
        """
        self.store = store
        self.settings = settings
        self.ban_duration = ban_duration
        self.sweep_interval = sweep_interval
        self._clock = clock

        self._on_ban_expired: Optional[ExpiredCallback] = None
        self._sweep_task: Optional[asyncio.Task] = None

        LOGGER.info(
            f"BanService init: durée={ban_duration.days}j, sweep toutes les {sweep_interval:.0f}s"
        )

    # ========================================================================
    # SWEEP LIFECYCLE
    # ========================================================================

    def set_expired_callback(self, callback: Optional[ExpiredCallback]) -> None:
        """Enregistre LE callback d'expiration (remplace le précédent)."""
        self._on_ban_expired = callback

    def is_running(self) -> bool:
        return self._sweep_task is not None and not self._sweep_task.done()

    async def start(self) -> None:
        """Démarre le sweep périodique"""
        if self.is_running():
            LOGGER.warning("⚠️ Sweep déjà en cours")
            return

        self._sweep_task = asyncio.create_task(self._sweep_loop())
        LOGGER.info("✅ Sweep des bans expirés démarré")

    async def stop(self) -> None:
        """Arrête le sweep proprement"""
        if not self._sweep_task:
            return

        self._sweep_task.cancel()
        try:
            await self._sweep_task
        except asyncio.CancelledError:
            pass
        self._sweep_task = None
        LOGGER.info("🛑 Sweep des bans expirés arrêté")

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval)
            await self.cleanup_expired_bans()

    async def cleanup_expired_bans(self) -> List[BannedSlot]:
        """
        Un passage de sweep: supprime les bans expirés et notifie le callback.

        Les erreurs sont loggées et ignorées pour ne jamais tuer la boucle.
        """
        try:
            expired = self.clear_expired_bans()
        except Exception as e:
            LOGGER.error(f"❌ Erreur pendant le sweep: {e}", exc_info=True)
            return []

        if expired and self._on_ban_expired:
            try:
                result = self._on_ban_expired(expired)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                LOGGER.error(f"❌ Erreur callback expiration: {e}", exc_info=True)

        return expired

    # ========================================================================
    # BANS
    # ========================================================================

    def get_all_banned_slots(self) -> List[BannedSlot]:
        return self.store.get_all()

    def get_ban_by_name(self, slot_name: str) -> Optional[BannedSlot]:
        return self.store.get_by_name(slot_name)

    def add_manual_ban(self, slot_name: str, banned_by: str) -> Optional[BannedSlot]:
        """
        Bannit un slot pour ban_duration.

        Returns:
            Le nouveau ban, ou None si le slot est déjà banni
        """
        if self.store.get_by_name(slot_name):
            LOGGER.info(f"ℹ️ '{slot_name}' est déjà banni")
            return None

        expires_at = self._clock() + self.ban_duration
        return self.store.create(slot_name, banned_by, expires_at)

    def remove_ban(self, slot_id: int) -> None:
        self.store.delete_by_id(slot_id)

    def clear_all_bans(self) -> None:
        """Supprime tous les bans, un par un."""
        slots = self.store.get_all()
        for slot in slots:
            self.store.delete_by_id(slot.id)
        LOGGER.info(f"🗑️ Cleared all slot bans ({len(slots)})")

    def clear_expired_bans(self, now: Optional[datetime] = None) -> List[BannedSlot]:
        """Supprime les bans expirés sans notifier (les erreurs remontent)."""
        return self.store.delete_expired(now or self._clock())

    # ========================================================================
    # REQUESTS STATUS
    # ========================================================================

    def toggle_requests_status(self) -> bool:
        """Inverse requests_open et retourne la nouvelle valeur."""
        new_status = not self.get_requests_status()
        self.settings.set(REQUESTS_OPEN, "true" if new_status else "false")
        LOGGER.info(f"🔀 Requests {'ouvertes' if new_status else 'fermées'}")
        return new_status

    def get_requests_status(self) -> bool:
        return self.settings.get(REQUESTS_OPEN) == "true"
