"""Error kinds raised by the service layer.

Each carries a user-safe `message` and the HTTP status the route layer
answers with. Services raise them; `main.py` translates them.
"""


class AppError(Exception):
    """Base error with a user-safe message and a status code."""

    status_code = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class NotFoundError(AppError):
    """The addressed row does not exist."""

    status_code = 404

    def __init__(self, message: str = "Not Found") -> None:
        super().__init__(message)


class BadRequestError(AppError):
    """Invalid input, or a write that returned no rows."""

    status_code = 400

    def __init__(self, message: str = "Bad Request") -> None:
        super().__init__(message)


class UnauthorizedError(AppError):
    """Missing or bad credentials, or a policy denial."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)
