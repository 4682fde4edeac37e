from canteen.enums.delivery_type import DeliveryType
from canteen.enums.order_status import OrderStatus
from canteen.models.order.order import Order
from canteen.enums.user_role import UserRole
from canteen.models.user.user import User


def test_list_users_paginates_and_filters(client, create_user, admin, user, canteen_user, auth_headers):
    for index in range(3):
        create_user(f"student{index}@example.com")
    headers = auth_headers(admin)

    first_page = client.get("/api/admin/users?page=1&limit=2", headers=headers).json()
    canteen_only = client.get("/api/admin/users?role=canteen", headers=headers).json()

    assert len(first_page["users"]) == 2
    assert first_page["pagination"] == {"page": 1, "limit": 2, "total": 6, "totalPages": 3}
    assert [u["email"] for u in canteen_only["users"]] == [canteen_user.email]


def test_create_canteen_account(client, admin, auth_headers):
    response = client.post("/api/admin/users", headers=auth_headers(admin), json={
        "name": "Kitchen Two", "email": "Kitchen2@example.com", "password": "secret123", "role": "canteen",
    })

    assert response.status_code == 201
    created = response.json()["user"]
    assert created["role"] == "canteen"
    assert created["email"] == "kitchen2@example.com"
    assert "password_hash" not in created

    login = client.post("/api/user/auth", json={"action": "login", "email": "kitchen2@example.com", "password": "secret123"})
    assert login.status_code == 200


def test_admins_cannot_be_created(client, admin, auth_headers):
    response = client.post("/api/admin/users", headers=auth_headers(admin), json={
        "name": "Root", "email": "root@example.com", "password": "secret123", "role": "admin",
    })

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid role"


def test_create_existing_user(client, admin, user, auth_headers):
    response = client.post("/api/admin/users", headers=auth_headers(admin), json={
        "name": "Dup", "email": user.email, "password": "secret123", "role": "user",
    })

    assert response.json()["message"] == "User already exists"


def test_update_user_cannot_touch_wallet_or_grant_admin(client, session, admin, user, auth_headers):
    response = client.put(f"/api/admin/users/{user.id}", headers=auth_headers(admin), json={
        "name": "Renamed", "role": "admin", "wallet_balance": 9999,
    })

    assert response.status_code == 200
    body = response.json()["user"]
    assert body["name"] == "Renamed"
    assert body["role"] == "user"
    assert body["wallet_balance"] == 100.0


def test_update_user_role(client, admin, user, auth_headers):
    response = client.put(f"/api/admin/users/{user.id}", headers=auth_headers(admin), json={"role": "canteen"})

    assert response.json()["user"]["role"] == "canteen"


def test_delete_is_soft(client, session, admin, user, auth_headers):
    headers = auth_headers(admin)

    response = client.delete(f"/api/admin/users/{user.id}", headers=headers)

    assert response.json() == {"success": True, "message": "User deleted"}
    session.expire_all()
    assert session.get(User, user.id).deleted_at is not None
    assert client.get(f"/api/admin/users/{user.id}", headers=headers).status_code == 404
    emails = [u["email"] for u in client.get("/api/admin/users", headers=headers).json()["users"]]
    assert user.email not in emails


def test_dashboard(client, session, admin, user, canteen_user, auth_headers, product):
    session.add(Order(user_id=user.id, total_amount=60.0, status=OrderStatus.COMPLETED, delivery_type=DeliveryType.CANTEEN))
    session.add(Order(user_id=user.id, total_amount=30.0, status=OrderStatus.CANCELLED, delivery_type=DeliveryType.CANTEEN))
    session.commit()

    stats = client.get("/api/admin/dashboard", headers=auth_headers(admin)).json()["stats"]

    assert stats["total_users"] == 3
    assert stats["total_products"] == 1
    assert stats["total_orders"] == 2
    assert stats["total_revenue"] == 60.0
    assert stats["cancelled"] == 1
    assert stats["user_roles"] == {"users": 1, "canteen": 1, "admin": 1}
    assert len(stats["sales_graph"]) == 30


def test_dashboard_is_admin_only(client, canteen_user, auth_headers):
    response = client.get("/api/admin/dashboard", headers=auth_headers(canteen_user))

    assert response.status_code == 401
    assert response.json()["message"] == "Forbidden"


def test_deleted_email_can_be_used_again(client, session, admin, create_user, auth_headers):
    gone = create_user("gone@example.com")
    headers = auth_headers(admin)
    client.delete(f"/api/admin/users/{gone.id}", headers=headers)

    signup = client.post("/api/user/auth", json={
        "action": "signup", "name": "Back Again", "email": "gone@example.com", "password": "secret123",
    })

    assert signup.status_code == 201
    session.expire_all()
    assert session.get(User, gone.id).email != "gone@example.com"
    assert session.get(User, gone.id).deleted_at is not None


def test_admin_can_recreate_deleted_account(client, admin, create_user, auth_headers):
    gone = create_user("gone@example.com", role=UserRole.CANTEEN)
    headers = auth_headers(admin)
    client.delete(f"/api/admin/users/{gone.id}", headers=headers)

    response = client.post("/api/admin/users", headers=headers, json={
        "name": "Kitchen", "email": "gone@example.com", "password": "secret123", "role": "canteen",
    })

    assert response.status_code == 201


def test_deleted_account_still_cannot_log_in(client, admin, create_user, auth_headers):
    gone = create_user("gone@example.com")
    client.delete(f"/api/admin/users/{gone.id}", headers=auth_headers(admin))

    response = client.post("/api/user/auth", json={"action": "login", "email": "gone@example.com", "password": "secret123"})

    assert response.status_code == 401


def test_create_user_requires_every_field(client, admin, auth_headers):
    response = client.post("/api/admin/users", headers=auth_headers(admin), json={
        "name": "No Role", "email": "norole@example.com", "password": "secret123",
    })

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Name, email, password, and role are required"}


def test_concurrent_create_with_same_email(client, admin, user, auth_headers, hide_first_lookup):
    hide_first_lookup()

    response = client.post("/api/admin/users", headers=auth_headers(admin), json={
        "name": "Twin", "email": user.email, "password": "secret123", "role": "user",
    })

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "User already exists"}


def test_email_update_losing_a_race(client, admin, user, create_user, auth_headers, hide_first_lookup):
    other = create_user("other@example.com")
    hide_first_lookup()

    response = client.put(f"/api/admin/users/{other.id}", headers=auth_headers(admin), json={"email": user.email})

    assert response.status_code == 400
    assert response.json()["message"] == "User already exists"
