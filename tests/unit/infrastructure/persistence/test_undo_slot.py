"""
Tests pour UndoSlot (tampon d'annulation persistant entre commandes).
"""

import pytest

from mediastack.infrastructure.persistence.undo_slot import UndoSlot
from mediastack.services.library import PendingRestore
from tests.fixtures.fakes import make_item


@pytest.fixture
def slot(tmp_path):
    slot = UndoSlot(tmp_path, window_seconds=10)
    yield slot
    slot.close()


class TestUndoSlot:
    def test_take_empty(self, slot):
        assert slot.take("local") is None

    def test_put_then_take(self, slot):
        token = PendingRestore(item=make_item("Heat"), index=2, expires_at=123.0)
        slot.put("local", token)

        assert slot.take("local") == token
        assert slot.take("local") is None

    def test_new_token_replaces_previous(self, slot):
        slot.put("local", PendingRestore(item=make_item("Heat"), index=0, expires_at=1.0))
        slot.put("local", PendingRestore(item=make_item("Alien"), index=1, expires_at=2.0))

        assert slot.take("local").item.title == "Alien"

    def test_survives_reopen(self, tmp_path):
        first = UndoSlot(tmp_path, window_seconds=10)
        first.put("local", PendingRestore(item=make_item("Heat"), index=0, expires_at=1.0))
        first.close()

        second = UndoSlot(tmp_path, window_seconds=10)
        try:
            assert second.take("local").item.title == "Heat"
        finally:
            second.close()
