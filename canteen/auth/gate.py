from typing import Dict, Iterable, Optional, Set
from fastapi import APIRouter, Depends, Request, status
from fastapi.routing import APIRoute

from canteen.auth.credentials import CredentialCodec, Principal
from canteen.core.exceptions.app_exception import Forbidden, MethodNotAllowed, Unauthorized
from canteen.enums.user_role import UserRole

BEARER_PREFIX = "Bearer "


class AuthorizationGate:
    """Single decision point for authentication and role membership."""

    def __init__(self, codec: CredentialCodec, forbidden_status_code: int = status.HTTP_401_UNAUTHORIZED):
        self.codec = codec
        self.forbidden_status_code = forbidden_status_code

    def authenticate(self, request: Request) -> Optional[Principal]:
        authorization = request.headers.get("Authorization")
        if not authorization or not authorization.startswith(BEARER_PREFIX):
            return None

        token = authorization[len(BEARER_PREFIX):].strip()
        if not token:
            return None
        return self.codec.decode_token(token)

    def enforce(self, request: Request, allowed_roles: Optional[Iterable[UserRole]] = None) -> Principal:
        principal = self.authenticate(request)
        if principal is None:
            raise Unauthorized()

        if allowed_roles is not None and principal.role not in set(allowed_roles):
            raise Forbidden(status_code=self.forbidden_status_code)
        return principal


def get_gate(request: Request) -> AuthorizationGate:
    return request.app.state.gate


def require_roles(*roles: UserRole):
    """Route dependency: the authenticated principal, restricted to ``roles``.

    With no roles any authenticated principal is accepted.
    """
    allowed = frozenset(roles) if roles else None

    def dependency(request: Request) -> Principal:
        return get_gate(request).enforce(request, allowed)

    return dependency


require_user = require_roles(UserRole.USER)
require_canteen = require_roles(UserRole.CANTEEN)
require_canteen_staff = require_roles(UserRole.CANTEEN, UserRole.ADMIN)
require_admin = require_roles(UserRole.ADMIN)


ROUTE_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH")


def reject_unsupported_methods(router: APIRouter, dependency) -> None:
    """Registers a 405 fallback on every path of ``router`` for the methods it does not serve.

    The fallback depends on ``dependency``, so an unauthenticated or
    under-privileged caller still gets the gate's answer first.
    """

    def method_not_allowed(current_user: Principal = Depends(dependency)):
        raise MethodNotAllowed()

    served: Dict[str, Set[str]] = {}
    for route in router.routes:
        if isinstance(route, APIRoute):
            served.setdefault(route.path, set()).update(route.methods)

    for path, methods in served.items():
        remaining = [method for method in ROUTE_METHODS if method not in methods]
        if remaining:
            router.add_api_route(
                path[len(router.prefix):],
                method_not_allowed,
                methods=remaining,
                include_in_schema=False,
            )
