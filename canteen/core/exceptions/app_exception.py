from fastapi import HTTPException, status
from typing import Optional, Any


class AppHttpException(HTTPException):
    def __init__(
        self,
        status_code: int,
        detail: str,
        solution: Optional[str] = None,
        errors: Optional[Any] = None,
    ):
        content = {
            "success": False,
            "message": detail,
        }
        if solution:
            content["solution"] = solution
        if errors:
            content["errors"] = errors

        super().__init__(status_code=status_code, detail=detail)
        self.status_code = status_code
        self.detail = detail
        self.solution = solution
        self.errors = errors
        self.content = content


class Unauthorized(AppHttpException):
    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class Forbidden(AppHttpException):
    """Valid token, role outside the route's allow-list.

    Answered with 401 unless the gate is configured with another status code.
    """

    def __init__(self, detail: str = "Forbidden", status_code: int = status.HTTP_401_UNAUTHORIZED):
        super().__init__(status_code=status_code, detail=detail)


class ValidationError(AppHttpException):
    def __init__(self, detail: str, errors: Optional[Any] = None):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail, errors=errors)


class NotFound(AppHttpException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class MethodNotAllowed(AppHttpException):
    def __init__(self, detail: str = "Method not allowed"):
        super().__init__(status_code=status.HTTP_405_METHOD_NOT_ALLOWED, detail=detail)


class InvalidOrderTransition(AppHttpException):
    def __init__(self, current: str, target: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot change order status from {current} to {target}",
        )
        self.current = current
        self.target = target


class PaymentGatewayError(AppHttpException):
    def __init__(self, detail: str = "Failed to create payment order", errors: Optional[Any] = None):
        super().__init__(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail, errors=errors)
