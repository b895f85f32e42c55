"""
Domain Errors

Every error raised by the service layer derives from AppError and carries
the HTTP status code it maps to. The exception handlers in app.main turn
them into the standard error envelope:

    {"success": false, "error": "<ErrorName>", "detail": "<message>"}
"""

from typing import Optional


class AppError(Exception):
    """Base class for client-facing failures."""

    status_code: int = 500
    error: str = "InternalError"

    def __init__(self, detail: str, *, error: Optional[str] = None):
        super().__init__(detail)
        self.detail = detail
        if error:
            self.error = error


class ValidationFailed(AppError):
    status_code = 400
    error = "ValidationError"


class AuthenticationFailed(AppError):
    status_code = 401
    error = "AuthenticationError"


class PermissionDenied(AppError):
    status_code = 403
    error = "Forbidden"


class NotFound(AppError):
    status_code = 404
    error = "NotFound"


class Conflict(AppError):
    status_code = 409
    error = "Conflict"


# =============================================================================
# ORDER PLACEMENT
# =============================================================================

class RestaurantNotFound(NotFound):
    error = "RestaurantNotFound"

    def __init__(self, restaurant_id: int):
        super().__init__("Restaurant not found")
        self.restaurant_id = restaurant_id


class ItemUnavailable(ValidationFailed):
    error = "ItemUnavailable"

    def __init__(self, menu_item_id: int):
        super().__init__(f"Menu item {menu_item_id} not found or unavailable")
        self.menu_item_id = menu_item_id


class InsufficientStock(ValidationFailed):
    error = "InsufficientStock"

    def __init__(self, menu_item_id: int, name: str):
        super().__init__(f"Insufficient stock for {name}")
        self.menu_item_id = menu_item_id
        self.name = name


class IllegalTransition(Conflict):
    error = "IllegalTransition"
