"""
Tests pour modules/moderation (SlotBanStore + SettingsStore)
"""
from datetime import timedelta

import pytest

from modules.moderation import SettingsStore
from modules.moderation.settings_store import REQUESTS_OPEN


@pytest.mark.unit
class TestSlotBanStore:
    """Tests du store en mémoire des slots bannis"""

    def test_create_assigns_increasing_ids(self, store, clock):
        first = store.create("Book of Dead", "Alice", clock() + timedelta(days=10))
        second = store.create("Sweet Bonanza", "Bob", clock() + timedelta(days=10))

        assert first.id == 1
        assert second.id == 2
        assert first.banned_at == clock()
        assert store.count() == 2

    def test_ids_are_never_reused(self, store, clock):
        slot = store.create("Book of Dead", "Alice", clock() + timedelta(days=10))
        store.delete_by_id(slot.id)

        again = store.create("Book of Dead", "Alice", clock() + timedelta(days=10))
        assert again.id == slot.id + 1

    def test_get_by_name_is_case_insensitive(self, store, clock):
        slot = store.create("Book of Dead", "Alice", clock() + timedelta(days=10))

        found = store.get_by_name("BOOK OF DEAD")
        assert found is not None
        assert found.id == slot.id
        assert found.slot_name == "Book of Dead"
        assert found.banned_by == "Alice"

    def test_get_by_name_missing(self, store):
        assert store.get_by_name("nope") is None

    def test_get_by_name_is_exact_match(self, store, clock):
        store.create("Book of Dead", "Alice", clock() + timedelta(days=10))
        assert store.get_by_name("Book of") is None

    def test_create_does_not_check_duplicates(self, store, clock):
        store.create("Foo", "A", clock() + timedelta(days=10))
        store.create("foo", "B", clock() + timedelta(days=10))
        assert store.count() == 2

    def test_delete_by_id_is_idempotent(self, store, clock):
        slot = store.create("Foo", "A", clock() + timedelta(days=10))

        store.delete_by_id(slot.id)
        store.delete_by_id(slot.id)
        store.delete_by_id(999)

        assert store.get_all() == []

    def test_get_all_keeps_insertion_order(self, store, clock):
        for name in ["a", "b", "c"]:
            store.create(name, "A", clock() + timedelta(days=10))
        assert [s.slot_name for s in store.get_all()] == ["a", "b", "c"]

    def test_delete_expired_scenario(self, store, clock):
        """Ban à T: rien à T+9j, supprimé à T+11j"""
        t = clock()
        slot = store.create("Book of Dead", "Alice", t + timedelta(days=10))

        assert store.delete_expired(t + timedelta(days=9)) == []
        assert store.get_by_name("Book of Dead") == slot

        assert store.delete_expired(t + timedelta(days=11)) == [slot]
        assert store.get_all() == []

    def test_delete_expired_returns_exact_subset(self, store, clock):
        t = clock()
        old = store.create("old", "A", t + timedelta(days=1))
        edge = store.create("edge", "A", t + timedelta(days=2))
        fresh = store.create("fresh", "A", t + timedelta(days=3))

        expired = store.delete_expired(t + timedelta(days=2))

        assert expired == [old, edge]
        assert store.get_all() == [fresh]

    def test_delete_expired_defaults_to_clock(self, store, clock):
        store.create("Foo", "A", clock() + timedelta(days=10))
        clock.advance(days=10)
        assert len(store.delete_expired()) == 1

    def test_to_dict_uses_camel_case(self, store, clock):
        slot = store.create("Foo", "A", clock() + timedelta(days=10))
        data = slot.to_dict()

        assert data["id"] == slot.id
        assert data["slotName"] == "Foo"
        assert data["bannedBy"] == "A"
        assert data["bannedAt"] == clock().isoformat()
        assert data["expiresAt"] == (clock() + timedelta(days=10)).isoformat()


@pytest.mark.unit
class TestSettingsStore:
    """Tests du store clé/valeur"""

    def test_requests_open_by_default(self):
        assert SettingsStore().get(REQUESTS_OPEN) == "true"

    def test_last_write_wins(self):
        settings = SettingsStore()
        settings.set("key", "one")
        settings.set("key", "two")
        assert settings.get("key") == "two"

    def test_missing_key(self):
        assert SettingsStore(defaults={}).get(REQUESTS_OPEN) is None
