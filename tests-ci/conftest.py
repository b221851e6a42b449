"""
Pytest configuration for CI tests
Provides common fixtures (horloge contrôlable, stores, bus, messages chat)
"""
from datetime import datetime, timedelta, timezone

import pytest

from core.message_bus import MessageBus, TOPIC_CHAT_OUTBOUND, TOPIC_SLOTBAN_EVENT
from core.message_types import ChatMessage
from modules.moderation import BanService, SettingsStore, SlotBanStore

T0 = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Horloge figée, avancée à la main"""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class Collector:
    """Subscriber de test: accumule tout ce qui passe sur un topic"""

    def __init__(self):
        self.items = []
        self.__name__ = "collector"

    async def __call__(self, data):
        self.items.append(data)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return SlotBanStore(clock=clock)


@pytest.fixture
def settings():
    return SettingsStore()


@pytest.fixture
def ban_service(store, settings, clock):
    return BanService(store, settings, clock=clock)


@pytest.fixture
def bus():
    return MessageBus()


@pytest.fixture
def outbound(bus):
    """Réponses chat publiées sur chat.outbound"""
    collector = Collector()
    bus.subscribe(TOPIC_CHAT_OUTBOUND, collector)
    return collector.items


@pytest.fixture
def events(bus):
    """SlotBanEvents publiés sur slotban.event"""
    collector = Collector()
    bus.subscribe(TOPIC_SLOTBAN_EVENT, collector)
    return collector.items


@pytest.fixture
def make_msg():
    """Factory de ChatMessage"""
    def _make(text, user="viewer1", is_mod=False, is_broadcaster=False, is_echo=False):
        return ChatMessage(
            channel="streamer",
            channel_id="1000",
            user_login=user,
            user_id="42",
            text=text,
            is_mod=is_mod,
            is_broadcaster=is_broadcaster,
            is_echo=is_echo,
            transport="test",
        )
    return _make
