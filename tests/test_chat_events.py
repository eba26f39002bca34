import asyncio

from fastapi.testclient import TestClient

from wedding_backfill.domain.chat import ConversationEventRegistry
from wedding_backfill.domain.chat.router import format_sse
from wedding_backfill.main import create_app


class TestConversationEventRegistry:
    def test_publish_reaches_conversation_subscribers_only(self):
        async def go():
            registry = ConversationEventRegistry()
            alice = registry.subscribe("c1", "alice")
            bob = registry.subscribe("c1", "bob")
            other = registry.subscribe("c2", "alice")

            delivered = registry.publish("c1", {"messageId": "m1", "content": "Bonjour"})

            assert delivered == 2
            assert await alice.next_event(timeout=1) == {
                "type": "new_message",
                "messageId": "m1",
                "content": "Bonjour",
            }
            assert (await bob.next_event(timeout=1))["messageId"] == "m1"
            assert await other.next_event(timeout=0.01) is None

        asyncio.run(go())

    def test_one_subscription_per_user_and_conversation(self):
        async def go():
            registry = ConversationEventRegistry()
            first = registry.subscribe("c1", "alice")
            second = registry.subscribe("c1", "alice")

            assert first.closed
            assert await first.next_event(timeout=1) is None
            assert registry.active_count("c1") == 1
            assert registry.publish("c1", {"messageId": "m2"}) == 1
            assert (await second.next_event(timeout=1))["messageId"] == "m2"

            # The stale stream leaving must not drop the newer one
            registry.unsubscribe(first)
            assert registry.active_count("c1") == 1

        asyncio.run(go())

    def test_unsubscribe(self):
        async def go():
            registry = ConversationEventRegistry()
            subscription = registry.subscribe("c1", "alice")

            registry.unsubscribe(subscription)

            assert subscription.closed
            assert registry.active_count() == 0
            assert registry.publish("c1", {"messageId": "m3"}) == 0

        asyncio.run(go())

    def test_custom_event_type(self):
        async def go():
            registry = ConversationEventRegistry()
            subscription = registry.subscribe("c1", "alice")
            registry.publish("c1", {"userId": "bob"}, event_type="typing")
            return await subscription.next_event(timeout=1)

        assert asyncio.run(go()) == {"type": "typing", "userId": "bob"}


class TestChatRouter:
    def test_format_sse(self):
        assert format_sse({"type": "connected"}) == 'data: {"type": "connected"}\n\n'

    def test_events_require_user(self):
        client = TestClient(create_app(create_tables=False))
        resp = client.get("/chat/events", params={"conversationId": "c1"})
        assert resp.status_code == 401

    def test_events_require_conversation(self):
        client = TestClient(create_app(create_tables=False))
        resp = client.get("/chat/events", headers={"X-User-Id": "alice"})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Conversation ID required"

    def test_registry_is_injected(self):
        registry = ConversationEventRegistry()
        app = create_app(event_registry=registry, create_tables=False)
        registry.subscribe("c1", "alice")

        resp = TestClient(app).get("/health")

        assert app.state.event_registry is registry
        assert resp.json() == {"status": "ok", "chat_subscriptions": 1}
