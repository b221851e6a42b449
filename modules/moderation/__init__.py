"""
Moderation Module - Slot bans temporaires

Contient:
- SlotBanStore: Slots bannis en mémoire (id → BannedSlot)
- SettingsStore: Paramètres clé/valeur (requests_open)
- BanService: Règles métier (doublons, expiration, sweep)

Usage:
    from modules.moderation import BanService, SettingsStore, SlotBanStore

    service = BanService(SlotBanStore(), SettingsStore())
    service.add_manual_ban("Book of Dead", "mod_username")
"""

from .slot_ban_store import BannedSlot, SlotBanStore
from .settings_store import SettingsStore
from .ban_service import BanService

__all__ = [
    "BannedSlot",
    "SlotBanStore",
    "SettingsStore",
    "BanService",
]
