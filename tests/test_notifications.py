import pytest
from fastapi.websockets import WebSocketDisconnect

from phonedeals.services.notification_service import NotificationBroadcaster


class TestBroadcaster:
    pytestmark = pytest.mark.unit

    def test_broadcast_counts_deliveries(self, make_listener):
        broadcaster = NotificationBroadcaster()
        first, second = make_listener(), make_listener()
        broadcaster.subscribe(first)
        broadcaster.subscribe(second)

        delivered = broadcaster.broadcast({"type": "NEW_ORDER", "data": {"id": 1}})

        assert delivered == 2
        assert first.events == second.events == [{"type": "NEW_ORDER", "data": {"id": 1}}]

    def test_closed_listener_is_skipped_and_dropped(self, make_listener):
        broadcaster = NotificationBroadcaster()
        closed = make_listener(open_=False)
        live = make_listener()
        broadcaster.subscribe(closed)
        broadcaster.subscribe(live)

        assert broadcaster.broadcast({"type": "NEW_ORDER"}) == 1
        assert closed.events == []
        assert len(broadcaster) == 1

    def test_failing_listener_is_dropped(self, make_listener):
        broadcaster = NotificationBroadcaster()
        broadcaster.subscribe(make_listener(fail=True))

        assert broadcaster.broadcast({"type": "NEW_ORDER"}) == 0
        assert len(broadcaster) == 0

    def test_unsubscribe_and_close(self, make_listener):
        broadcaster = NotificationBroadcaster()
        gone, kept = make_listener(), make_listener()
        broadcaster.subscribe(gone)
        broadcaster.subscribe(kept)
        broadcaster.unsubscribe(gone)
        broadcaster.unsubscribe(gone)

        broadcaster.close()

        assert kept.closed is True
        assert gone.closed is False
        assert broadcaster.broadcast({"type": "NEW_ORDER"}) == 0


class TestOrderFeed:
    pytestmark = pytest.mark.integration

    def test_admin_receives_new_order(self, client, login, make_user, make_phone):
        admin = make_user(role="admin")
        buyer = make_user()
        phone = make_phone(stock=5)

        with client.websocket_connect("/ws/orders", headers=login(admin)) as ws:
            assert ws.receive_json() == {"type": "SUBSCRIBED"}

            resp = client.post(
                f"/users/{buyer.id}/cart/checkout",
                json={"items": [{"phone_id": phone.id, "quantity": 1}]},
                headers=login(buyer),
            )
            assert resp.status_code == 201

            event = ws.receive_json()
            assert event["type"] == "NEW_ORDER"
            assert event["data"]["id"] == resp.json()["order_id"]

    def test_non_admin_is_rejected(self, client, login, make_user):
        with pytest.raises(WebSocketDisconnect):
            with client.websocket_connect("/ws/orders", headers=login(make_user())) as ws:
                ws.receive_json()

    def test_anonymous_is_rejected(self, client):
        with pytest.raises(WebSocketDisconnect):
            with client.websocket_connect("/ws/orders") as ws:
                ws.receive_json()
