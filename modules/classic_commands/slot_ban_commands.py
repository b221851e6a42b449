"""
Slot Ban Commands Module - !ban, !banlist, !unban
=================================================
Ban temporaire de slots demandés par le chat.

Pattern: handler(MessageHandler, ChatMessage, args: str) -> None
"""

import logging

from core.message_bus import TOPIC_CHAT_OUTBOUND, TOPIC_SLOTBAN_EVENT
from core.message_types import ChatMessage, EventType, OutboundMessage, SlotBanEvent

LOGGER = logging.getLogger("slotbanbot.commands.slot_bans")

# Réponses par défaut (chat germanophone), surchargées via config.yaml > replies
DEFAULT_REPLIES = {
    "ban_added": "{slot} wurde für {days} Tage gebannt.",
    "ban_exists": "{slot} ist bereits gebannt.",
    "banlist_empty": "Aktuell sind keine Slots gebannt.",
    "banlist": "Gebannte Slots ({count}): {slots}",
    "unban_done": "{slot} wurde von der Banliste entfernt.",
    "unban_missing": "{slot} ist nicht auf der Banliste.",
}

UNBAN_ATTRIBUTION = "Moderator"


async def _reply(handler, msg: ChatMessage, key: str, **fields) -> None:
    text = handler.replies[key].format(**fields)
    await handler.bus.publish(TOPIC_CHAT_OUTBOUND, OutboundMessage(
        channel=msg.channel,
        text=text
    ))


async def handle_ban(handler, msg: ChatMessage, slot_name: str) -> None:
    """
    !ban <slot> - Bannit un slot (tout le monde, si les requests sont ouvertes)

    Requests fermées = ignoré silencieusement.
    """
    ban_service = handler.ban_service

    if not ban_service.get_requests_status():
        LOGGER.debug(f"🔒 Requests fermées, !ban ignoré ({msg.user_login})")
        return

    slot = ban_service.add_manual_ban(slot_name, msg.user_login)
    if slot is None:
        await _reply(handler, msg, "ban_exists", slot=slot_name)
        return

    LOGGER.info(f"🚫 SLOTBAN | #{msg.channel} | {msg.user_login} banned: '{slot_name}'")
    await handler.bus.publish(TOPIC_SLOTBAN_EVENT, SlotBanEvent(
        type=EventType.BAN_ADDED,
        data=slot.to_dict()
    ))
    await _reply(handler, msg, "ban_added", slot=slot_name, days=ban_service.ban_duration.days)


async def handle_banlist(handler, msg: ChatMessage, args: str = "") -> None:
    """
    !banlist - Liste les slots actuellement bannis
    """
    slots = handler.ban_service.get_all_banned_slots()

    if not slots:
        await _reply(handler, msg, "banlist_empty")
        return

    names = ", ".join(slot.slot_name for slot in slots)
    await _reply(handler, msg, "banlist", count=len(slots), slots=names)


async def handle_unban(handler, msg: ChatMessage, slot_name: str) -> None:
    """
    !unban <slot> - Retire un slot de la banliste (mod/broadcaster only)
    """
    if not msg.is_privileged:
        return  # Silently ignore

    ban_service = handler.ban_service
    slot = ban_service.get_ban_by_name(slot_name)

    if slot is None:
        await _reply(handler, msg, "unban_missing", slot=slot_name)
        return

    ban_service.remove_ban(slot.id)
    LOGGER.info(f"✅ SLOTBAN | #{msg.channel} | {msg.user_login} unbanned: '{slot_name}'")
    await _reply(handler, msg, "unban_done", slot=slot_name)

    await handler.bus.publish(TOPIC_SLOTBAN_EVENT, SlotBanEvent(
        type=EventType.BAN_REMOVED,
        data={"id": slot.id, "slotName": slot_name, "removedBy": UNBAN_ATTRIBUTION}
    ))
