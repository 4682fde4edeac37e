import os

os.environ["JWT_SECRET"] = "test-signing-secret-with-at-least-32-characters"
os.environ["INIT_DATABASE"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ENVIRONMENT"] = "test"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from canteen import create_app, models  # noqa: F401
from canteen.auth.credentials import Principal
from canteen.configuration.settings import Configuration
from canteen.database.connection import get_session
from canteen.enums.user_role import UserRole
from canteen.models.product.product import Product
from canteen.models.user.user import User


class FakeGateway:
    """Stands in for Razorpay; records what the routes asked for."""

    key_id = "rzp_test_key"

    def __init__(self):
        self.orders = {}
        self.valid_signatures = set()

    def create_order(self, amount, receipt):
        order_id = f"order_{len(self.orders) + 1}"
        self.orders[order_id] = int(round(amount * 100))
        return {"id": order_id, "amount": self.orders[order_id], "currency": "INR", "status": "created", "receipt": receipt}

    def order_amount(self, order_id):
        return self.orders[order_id] / 100

    def verify_payment(self, order_id, payment_id, signature):
        return (order_id, payment_id, signature) in self.valid_signatures


@pytest.fixture(name="engine")
def engine_fixture():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="configuration")
def configuration_fixture():
    return Configuration()


@pytest.fixture(name="gateway")
def gateway_fixture():
    return FakeGateway()


@pytest.fixture(name="make_client")
def make_client_fixture(session, configuration, gateway):
    """Builds a client; keyword arguments override configuration attributes."""

    def make_client(raise_server_exceptions=True, **overrides):
        for key, value in overrides.items():
            setattr(configuration, key, value)
        app = create_app(configuration)
        app.state.payment_gateway = gateway
        app.dependency_overrides[get_session] = lambda: session
        return TestClient(app, raise_server_exceptions=raise_server_exceptions)

    return make_client


@pytest.fixture(name="client")
def client_fixture(make_client):
    return make_client()


@pytest.fixture(name="codec")
def codec_fixture(client):
    return client.app.state.gate.codec


@pytest.fixture(name="create_user")
def create_user_fixture(session, codec):
    def create_user(email, role=UserRole.USER, password="secret123", wallet_balance=0.0, name="Test User"):
        user = User(
            name=name,
            email=email,
            password_hash=codec.hash_password(password),
            role=role,
            wallet_balance=wallet_balance,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return create_user


@pytest.fixture(name="auth_headers")
def auth_headers_fixture(codec):
    def auth_headers(user):
        token = codec.issue_token(Principal(user_id=user.id, email=user.email, role=user.role))
        return {"Authorization": f"Bearer {token}"}

    return auth_headers


@pytest.fixture(name="user")
def user_fixture(create_user):
    return create_user("student@example.com", wallet_balance=100.0)


@pytest.fixture(name="canteen_user")
def canteen_user_fixture(create_user):
    return create_user("kitchen@example.com", role=UserRole.CANTEEN)


@pytest.fixture(name="admin")
def admin_fixture(create_user):
    return create_user("admin@example.com", role=UserRole.ADMIN)


@pytest.fixture(name="product")
def product_fixture(session, canteen_user):
    product = Product(name="Masala Dosa", price=40.0, category="breakfast", created_by=canteen_user.id)
    session.add(product)
    session.commit()
    session.refresh(product)
    return product


class _NoRows:
    def first(self):
        return None


@pytest.fixture(name="hide_first_lookup")
def hide_first_lookup_fixture(session, monkeypatch):
    """Makes the next ``session.exec`` find nothing, as if a concurrent request had not committed yet."""

    def hide_first_lookup():
        original_exec = session.exec
        pending = [True]

        def exec_once_empty(statement, *args, **kwargs):
            if pending:
                pending.clear()
                return _NoRows()
            return original_exec(statement, *args, **kwargs)

        monkeypatch.setattr(session, "exec", exec_once_empty)

    return hide_first_lookup
