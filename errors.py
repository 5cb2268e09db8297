class ShopError(Exception):
    """Base class for errors the API turns into JSON responses."""

    status_code = 400
    message = "request failed"

    def __init__(self, message: str = None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def body(self) -> dict:
        return {"success": False, "errors": self.message}


class DuplicateEmail(ShopError):
    message = "existing user found with this email"


class InvalidCredentials(ShopError):
    message = "please try with correct email/password"


class Unauthenticated(ShopError):
    status_code = 401
    message = "Please authenticate using a valid token"

    def body(self) -> dict:
        return {"errors": self.message}


class UnknownUser(ShopError):
    status_code = 404
    message = "user not found"

    def body(self) -> dict:
        return {"errors": self.message}


class DatabaseUnavailable(ShopError):
    status_code = 500
    message = "Database not available"

    def body(self) -> dict:
        return {"detail": self.message}


class InvalidEmail(ShopError):
    message = "please enter a valid email address"
