# backend/services/errors.py
"""Errors raised by the service layer.

Every error carries a human-readable message and the HTTP status the API
answers with; ``main.py`` renders them as ``{"message": ...}``.
"""


class ServiceError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    status_code = 404


class BusinessRuleError(ServiceError):
    status_code = 400


class InvalidTransitionError(BusinessRuleError):
    pass


class PermissionDeniedError(ServiceError):
    status_code = 403
