import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import select

from canteen.enums.delivery_type import DeliveryType
from canteen.enums.order_status import OrderStatus
from canteen.models.notification.notification import Notification
from canteen.models.order.order import Order


@pytest.fixture
def order(session, user):
    order = Order(user_id=user.id, total_amount=80.0, status=OrderStatus.PENDING, delivery_type=DeliveryType.CANTEEN)
    session.add(order)
    session.commit()
    session.refresh(order)
    return order


def order_notifications(session, user):
    return session.exec(select(Notification).where(Notification.user_id == user.id)).all()


@pytest.mark.parametrize("target", OrderStatus.values())
def test_any_status_is_accepted_by_default(client, canteen_user, auth_headers, order, target):
    response = client.put(f"/api/canteen/orders/{order.id}", headers=auth_headers(canteen_user), json={"status": target})

    assert response.status_code == 200
    assert response.json()["order"]["status"] == target


def test_status_change_writes_exactly_one_notification(client, session, canteen_user, user, auth_headers, order):
    client.put(f"/api/canteen/orders/{order.id}", headers=auth_headers(canteen_user), json={"status": "ready"})

    notifications = order_notifications(session, user)
    assert len(notifications) == 1
    assert notifications[0].title == "Order Status Updated"
    assert notifications[0].message == f"Your order #{order.id[:8]} is now ready"
    assert notifications[0].is_read is False


def test_regression_is_allowed_by_default(client, session, canteen_user, auth_headers, order):
    order.status = OrderStatus.COMPLETED
    session.add(order)
    session.commit()

    response = client.put(f"/api/canteen/orders/{order.id}", headers=auth_headers(canteen_user), json={"status": "pending"})

    assert response.status_code == 200
    assert response.json()["order"]["status"] == "pending"


def test_strict_mode_follows_the_lifecycle(make_client, session, canteen_user, user, auth_headers, order):
    client = make_client(strict_order_transitions=True)
    headers = auth_headers(canteen_user)

    skipped = client.put(f"/api/canteen/orders/{order.id}", headers=headers, json={"status": "ready"})
    assert skipped.status_code == 400
    assert skipped.json()["message"] == "Cannot change order status from pending to ready"
    assert order_notifications(session, user) == []

    for target in ("accepted", "preparing", "ready", "completed"):
        response = client.put(f"/api/canteen/orders/{order.id}", headers=headers, json={"status": target})
        assert response.status_code == 200

    reopened = client.put(f"/api/canteen/orders/{order.id}", headers=headers, json={"status": "pending"})
    assert reopened.status_code == 400


def test_unknown_status_is_rejected(client, session, canteen_user, user, auth_headers, order):
    response = client.put(f"/api/canteen/orders/{order.id}", headers=auth_headers(canteen_user), json={"status": "delivered"})

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Valid status is required"}
    assert order_notifications(session, user) == []


def test_missing_status_is_rejected(client, canteen_user, auth_headers, order):
    response = client.put(f"/api/canteen/orders/{order.id}", headers=auth_headers(canteen_user), json={})

    assert response.status_code == 400
    assert response.json()["message"] == "Valid status is required"


def test_unknown_order(client, canteen_user, auth_headers):
    response = client.put("/api/canteen/orders/missing", headers=auth_headers(canteen_user), json={"status": "ready"})

    assert response.status_code == 404
    assert response.json()["message"] == "Order not found"


def test_admin_cannot_update_order_status(client, admin, auth_headers, order):
    response = client.put(f"/api/canteen/orders/{order.id}", headers=auth_headers(admin), json={"status": "ready"})

    assert response.json()["message"] == "Forbidden"


def test_list_orders_with_customer_and_filter(client, session, canteen_user, user, auth_headers, order):
    session.add(Order(user_id=user.id, total_amount=20.0, status=OrderStatus.READY, delivery_type=DeliveryType.CANTEEN))
    session.commit()
    headers = auth_headers(canteen_user)

    all_orders = client.get("/api/canteen/orders", headers=headers).json()["orders"]
    ready = client.get("/api/canteen/orders?status=ready", headers=headers).json()["orders"]

    assert len(all_orders) == 2
    assert all_orders[0]["user"]["email"] == user.email
    assert [o["status"] for o in ready] == ["ready"]


def test_invalid_status_filter(client, canteen_user, auth_headers):
    response = client.get("/api/canteen/orders?status=lost", headers=auth_headers(canteen_user))

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid status filter"


def test_canteen_stats(client, session, canteen_user, user, auth_headers, order):
    session.add(Order(user_id=user.id, total_amount=120.0, status=OrderStatus.COMPLETED, delivery_type=DeliveryType.CANTEEN))
    session.commit()

    stats = client.get("/api/canteen/stats", headers=auth_headers(canteen_user)).json()["stats"]

    assert stats["total_orders"] == 2
    assert stats["pending"] == 1
    assert stats["completed"] == 1
    assert stats["total_revenue"] == 120.0
    assert stats["today_orders"] == 2
    assert len(stats["sales_graph"]) == 7
    assert stats["sales_graph"][-1]["revenue"] == 120.0


def test_failed_notification_keeps_the_status_change(client, session, canteen_user, user, auth_headers, order, monkeypatch):
    original_add = session.add

    def add(instance, *args, **kwargs):
        if isinstance(instance, Notification):
            raise OperationalError("INSERT INTO notifications", {}, Exception("disk full"))
        return original_add(instance, *args, **kwargs)

    monkeypatch.setattr(session, "add", add)

    response = client.put(f"/api/canteen/orders/{order.id}", headers=auth_headers(canteen_user), json={"status": "accepted"})

    monkeypatch.undo()
    assert response.status_code == 200
    session.expire_all()
    assert session.get(Order, order.id).status == OrderStatus.ACCEPTED
    assert order_notifications(session, user) == []
