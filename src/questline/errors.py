"""Domain exceptions raised by service functions.

Services raise these instead of HTTP errors; the global handler in
``questline.middleware.error_handler`` turns them into envelope responses
using ``status_code``.
"""

from __future__ import annotations


class ServiceError(ValueError):
    """A request broke a validation or business rule."""

    status_code: int = 400


class NotFoundError(ServiceError):
    status_code = 404


class AuthenticationError(ServiceError):
    status_code = 401


class AlreadyCompletedError(ServiceError):
    """The mission was already completed by this user today."""

    def __init__(self, msg: str = "Mission already completed today. Come back tomorrow!") -> None:
        super().__init__(msg)
