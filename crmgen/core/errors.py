"""Errors raised by the CRUD service layer and mapped to HTTP responses in crmgen.main."""


class ServiceError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    status_code = 404


class HookError(ServiceError):
    """A lifecycle hook rejected the operation (business-rule violation)."""
    status_code = 400
