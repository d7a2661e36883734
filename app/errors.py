# app/errors.py
"""Error taxonomy shared by services and routes.

Every error has a human readable `message` and a machine checkable `kind`;
the HTTP layer maps `status_code` straight onto the response.
"""


class AppError(Exception):
    status_code = 500
    kind = "internal_error"
    default_message = "Internal error"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {"message": self.message, "kind": self.kind}


class ValidationError(AppError):
    status_code = 400
    kind = "validation_error"
    default_message = "Invalid input"


class UnauthorizedError(AppError):
    status_code = 401
    kind = "unauthorized"
    default_message = "Missing token"


class ForbiddenError(AppError):
    status_code = 403
    kind = "forbidden"
    default_message = "Not allowed"


class NotFoundError(AppError):
    status_code = 404
    kind = "not_found"
    default_message = "Not found"


class ConflictError(AppError):
    status_code = 409
    kind = "conflict"
    default_message = "Conflict"


class InternalError(AppError):
    pass
