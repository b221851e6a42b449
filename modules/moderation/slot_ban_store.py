#!/usr/bin/env python3
"""
Slot Ban Store - Liste des slots bannis (en mémoire)

Chaque ban est identifié par un id numérique croissant.
Le store ne vérifie PAS les doublons: c'est le rôle de BanService.

Usage:
    store = SlotBanStore()
    slot = store.create("Book of Dead", "moderator", expires_at)
    store.get_by_name("book of dead")  # case-insensitive
    store.delete_expired()             # sweep
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

LOGGER = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class BannedSlot:
    """Un slot banni temporairement des requests."""
    id: int
    slot_name: str
    banned_by: str
    banned_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now

    def to_dict(self) -> dict:
        """Représentation JSON (camelCase, consommée par le dashboard)."""
        return {
            "id": self.id,
            "slotName": self.slot_name,
            "bannedBy": self.banned_by,
            "bannedAt": self.banned_at.isoformat(),
            "expiresAt": self.expires_at.isoformat(),
        }


class SlotBanStore:
    """
    Store en mémoire des slots bannis.

    Les ids ne sont jamais réutilisés, même après suppression.
    L'ordre d'insertion est conservé par get_all().
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self._clock = clock
        self._slots: Dict[int, BannedSlot] = {}
        self._next_id = 1

    def get_all(self) -> List[BannedSlot]:
        return list(self._slots.values())

    def get_by_name(self, slot_name: str) -> Optional[BannedSlot]:
        """
        Cherche un slot par nom (case-insensitive, match exact).

        Returns:
            Le slot trouvé, ou None
        """
        wanted = slot_name.lower()
        for slot in self._slots.values():
            if slot.slot_name.lower() == wanted:
                return slot
        return None

    def create(self, slot_name: str, banned_by: str, expires_at: datetime) -> BannedSlot:
        """
        Enregistre un nouveau ban (banned_at = maintenant).

        Args:
            slot_name: Nom du slot
            banned_by: Qui a banni
            expires_at: Date d'expiration calculée par l'appelant
        """
        slot = BannedSlot(
            id=self._next_id,
            slot_name=slot_name,
            banned_by=banned_by,
            banned_at=self._clock(),
            expires_at=expires_at,
        )
        self._slots[slot.id] = slot
        self._next_id += 1
        LOGGER.info(f"🚫 Slot banned: '{slot_name}' (id={slot.id}) by {banned_by}")
        return slot

    def delete_by_id(self, slot_id: int) -> None:
        """Supprime un ban. No-op si l'id n'existe pas."""
        removed = self._slots.pop(slot_id, None)
        if removed:
            LOGGER.info(f"✅ Slot unbanned: '{removed.slot_name}' (id={slot_id})")

    def delete_expired(self, now: Optional[datetime] = None) -> List[BannedSlot]:
        """
        Supprime et retourne tous les bans dont expires_at <= now.

        Args:
            now: Instant de référence (défaut: horloge du store)
        """
        now = now or self._clock()
        expired = [slot for slot in self._slots.values() if slot.is_expired(now)]
        for slot in expired:
            del self._slots[slot.id]

        if expired:
            LOGGER.info(f"🗑️ Removed {len(expired)} expired slot bans")
        return expired

    def count(self) -> int:
        return len(self._slots)

    def get_stats(self) -> Dict:
        """Retourne des stats sur les bans."""
        return {
            "total_bans": len(self._slots),
            "next_id": self._next_id,
        }
