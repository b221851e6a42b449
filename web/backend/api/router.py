#!/usr/bin/env python3
"""
API Routes - Endpoints pour le dashboard et l'overlay

Chaque mutation publie l'événement correspondant sur slotban.event
(→ NotificationHub → WebSockets).
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, field_validator

from core.message_bus import TOPIC_SLOTBAN_EVENT
from core.message_types import EventType, SlotBanEvent
from core.registry import Registry
from web.backend.dependencies import get_registry

logger = logging.getLogger(__name__)
router = APIRouter()


# ============================================================
# PYDANTIC MODELS - Validation des entrées
# ============================================================

class BanSlotCreate(BaseModel):
    """Body de POST /ban-slot (champs camelCase du dashboard)."""
    slotName: Optional[str] = None
    bannedBy: Optional[str] = None

    @field_validator('slotName', 'bannedBy')
    @classmethod
    def strip_value(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if isinstance(v, str) else v


async def _publish(registry: Registry, event_type: EventType, data: dict) -> None:
    await registry.bus.publish(TOPIC_SLOTBAN_EVENT, SlotBanEvent(type=event_type, data=data))


# ============================================================
# BANNED SLOTS API
# ============================================================

@router.get("/banned-slots")
async def list_banned_slots(registry: Registry = Depends(get_registry)):
    """Liste tous les slots bannis."""
    try:
        return [slot.to_dict() for slot in registry.ban_service.get_all_banned_slots()]
    except Exception as e:
        logger.error(f"Error fetching banned slots: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch banned slots")


@router.post("/ban-slot")
@router.post("/banned-slots")
async def ban_slot(payload: BanSlotCreate, registry: Registry = Depends(get_registry)):
    """
    Bannit un slot manuellement.
    Body JSON attendu: {"slotName": "...", "bannedBy": "..."}

    400 si un champ manque, 409 si le slot est déjà banni.
    """
    if not payload.slotName or not payload.bannedBy:
        raise HTTPException(status_code=400, detail="slotName and bannedBy are required")

    try:
        slot = registry.ban_service.add_manual_ban(payload.slotName, payload.bannedBy)
    except Exception as e:
        logger.error(f"Error banning slot: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to ban slot")

    if slot is None:
        raise HTTPException(status_code=409, detail="Slot is already banned")

    logger.info(f"🚫 API: {payload.bannedBy} banned '{payload.slotName}'")
    await _publish(registry, EventType.BAN_ADDED, slot.to_dict())
    return slot.to_dict()


@router.delete("/ban-slot/{slot_id}")
@router.delete("/banned-slots/{slot_id}")
async def remove_ban(slot_id: int, registry: Registry = Depends(get_registry)):
    """Retire un ban par id (idempotent)."""
    try:
        registry.ban_service.remove_ban(slot_id)
    except Exception as e:
        logger.error(f"Error removing ban {slot_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to remove ban")

    await _publish(registry, EventType.BAN_REMOVED, {"id": slot_id})
    return {"success": True}


@router.delete("/clear-expired")
async def clear_expired(registry: Registry = Depends(get_registry)):
    """Sweep manuel des bans expirés."""
    try:
        expired = registry.ban_service.clear_expired_bans()
    except Exception as e:
        logger.error(f"Error clearing expired bans: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to clear expired bans")

    await _publish(
        registry,
        EventType.BAN_EXPIRED,
        {"expiredBans": [slot.to_dict() for slot in expired]}
    )
    return {"removed": len(expired)}


@router.delete("/clear-all")
async def clear_all(registry: Registry = Depends(get_registry)):
    """Supprime tous les bans."""
    try:
        registry.ban_service.clear_all_bans()
    except Exception as e:
        logger.error(f"Error clearing all bans: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to clear all bans")

    await _publish(registry, EventType.BAN_REMOVED, {"clearAll": True})
    return {"success": True}


# ============================================================
# STATUS API
# ============================================================

@router.post("/toggle-requests")
async def toggle_requests(registry: Registry = Depends(get_registry)):
    """Ouvre / ferme les requests (!ban du chat)."""
    try:
        requests_open = registry.ban_service.toggle_requests_status()
    except Exception as e:
        logger.error(f"Error toggling requests status: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to toggle requests status")

    await _publish(registry, EventType.STATUS_CHANGED, {"requestsOpen": requests_open})
    return {"requestsOpen": requests_open}


@router.get("/status")
async def status(registry: Registry = Depends(get_registry)):
    """État global: requests, bot, nombre de bans."""
    try:
        return {
            "requestsOpen": registry.ban_service.get_requests_status(),
            "botConnected": registry.irc_client.is_connected(),
            "totalBans": len(registry.ban_service.get_all_banned_slots()),
        }
    except Exception as e:
        logger.error(f"Error fetching status: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch status")
