from fastapi.exceptions import RequestValidationError
from fastapi.routing import APIRouter


def test_unsupported_method_uses_envelope(client):
    response = client.patch("/api/products")

    assert response.status_code == 405
    assert response.json() == {"success": False, "message": "Method not allowed"}


def test_unknown_route_uses_envelope(client):
    response = client.get("/api/nothing-here")

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Not found"}


def test_malformed_body_is_a_400(client):
    response = client.post("/api/user/auth", content="not json", headers={"Content-Type": "application/json"})

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_missing_auth_is_rejected_before_body_validation(client):
    response = client.put("/api/canteen/orders/any", json={"status": "nonsense"})

    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Unauthorized"}


def _failing_router():
    router = APIRouter()

    def explode():
        raise RuntimeError("database password is hunter2")

    router.add_api_route("/explode", explode, methods=["GET"])
    return router


def test_unexpected_errors_hide_details_when_not_exposed(make_client):
    client = make_client(raise_server_exceptions=False, expose_errors=False)
    client.app.include_router(_failing_router())

    response = client.get("/explode")

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Internal server error"}


def test_unexpected_errors_show_message_when_exposed(make_client):
    client = make_client(raise_server_exceptions=False, expose_errors=True)
    client.app.include_router(_failing_router())

    response = client.get("/explode")

    assert response.status_code == 500
    assert response.json()["message"] == "database password is hunter2"


def test_validation_message_strips_value_error_prefix():
    from canteen.core.exceptions.handlers import format_validation_message

    exc = RequestValidationError([{"loc": ("body",), "msg": "Value error, Cart is empty", "type": "value_error"}])

    assert format_validation_message(exc) == "Cart is empty"


def test_validation_message_names_the_field():
    from canteen.core.exceptions.handlers import format_validation_message

    exc = RequestValidationError([{"loc": ("body", "price"), "msg": "Input should be greater than 0", "type": "greater_than"}])

    assert format_validation_message(exc) == "price: Input should be greater than 0"
