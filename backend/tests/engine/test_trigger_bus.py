"""
Trigger bus unit tests
"""
import pytest

from core.engine.event_bus import DocumentWriteEvent, TriggerBus, compile_pattern


class TestCompilePattern:

    def test_named_wildcards(self):
        regex = compile_pattern("hotels/{hotelUid}/catalogproducts")
        match = regex.match("hotels/hotel-1/catalogproducts")
        assert match.groupdict() == {"hotelUid": "hotel-1"}

    def test_anchored(self):
        regex = compile_pattern("hotels/{hotelUid}/catalogproducts")
        assert regex.match("hotels/hotel-1/supplierproducts") is None
        assert regex.match("hotels/a/b/catalogproducts") is None
        assert regex.match("hotels/hotel-1/catalogproducts/extra") is None


class TestTriggerBus:

    @pytest.fixture
    def event(self):
        return DocumentWriteEvent(
            collection="hotels/hotel-1/catalogproducts",
            document_id="p1",
            after={"name": "Milk"},
        )

    def test_delivers_with_params(self, bus, event):
        """Matching handler receives the wildcard values"""
        received = []
        bus.subscribe("hotels/{hotelUid}/catalogproducts", received.append)
        result = bus.publish(event)

        assert result.subscriber_count == 1
        assert result.success_count == 1
        assert received[0].params == {"hotelUid": "hotel-1"}
        assert received[0].path == "hotels/hotel-1/catalogproducts/p1"
        assert received[0].exists is True

    def test_non_matching_collection_not_delivered(self, bus):
        received = []
        bus.subscribe("hotels/{hotelUid}/catalogproducts", received.append)
        bus.publish(DocumentWriteEvent(collection="hotels/hotel-1/roles", document_id="r1"))
        assert received == []

    def test_duplicate_subscription_ignored(self, bus, event):
        received = []
        bus.subscribe("hotels/{hotelUid}/catalogproducts", received.append)
        bus.subscribe("hotels/{hotelUid}/catalogproducts", received.append)
        bus.publish(event)
        assert len(received) == 1

    def test_unsubscribe(self, bus, event):
        received = []
        bus.subscribe("hotels/{hotelUid}/catalogproducts", received.append)
        bus.unsubscribe("hotels/{hotelUid}/catalogproducts", received.append)
        bus.publish(event)
        assert received == []

    def test_failing_handler_redelivered_until_success(self, event):
        """At-least-once: the same event id is redelivered"""
        bus = TriggerBus(max_attempts=3)
        seen = []

        def flaky(e):
            seen.append(e.event_id)
            if len(seen) < 2:
                raise RuntimeError("transient")

        bus.subscribe("hotels/{hotelUid}/catalogproducts", flaky)
        result = bus.publish(event)

        assert result.attempts == 2
        assert result.success_count == 1
        assert seen[0] == seen[1] == event.event_id
        assert bus.get_statistics().total_redelivered == 1

    def test_exhausted_handler_is_dead_lettered(self, event):
        """Failure is recorded, publish never raises, other handlers still run"""
        bus = TriggerBus(max_attempts=2)
        received = []

        def broken(e):
            raise ValueError("always")

        bus.subscribe("hotels/{hotelUid}/catalogproducts", broken)
        bus.subscribe("hotels/{hotelUid}/catalogproducts", received.append)
        result = bus.publish(event)

        assert result.failure_count == 1
        assert result.success_count == 1
        assert result.attempts == 3
        assert isinstance(result.errors[0][1], ValueError)
        failed_event, handler_name, error = bus.get_failed()[0]
        assert failed_event.document_id == "p1"
        assert handler_name == "broken"
        assert len(received) == 1

    def test_history_and_statistics(self, bus, event):
        bus.subscribe("hotels/{hotelUid}/catalogproducts", lambda e: None)
        bus.publish(event)
        bus.publish(DocumentWriteEvent(collection="hotels/hotel-1/catalogproducts", document_id="p2"))

        assert [e.document_id for e in bus.get_history()] == ["p2", "p1"]
        stats = bus.get_statistics()
        assert stats.total_published == 2
        assert stats.total_processed == 2
        assert stats.subscriber_count == {"hotels/{hotelUid}/catalogproducts": 1}

    def test_clear(self, bus, event):
        bus.subscribe("hotels/{hotelUid}/catalogproducts", lambda e: None)
        bus.publish(event)
        bus.clear()
        assert bus.get_subscribers() == {}
        assert bus.get_history() == []
        assert bus.get_statistics().total_published == 0
