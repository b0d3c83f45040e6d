class StorefrontError(Exception):
    """Base class for every failure the storefront client can report."""

    default_message = "Something went wrong. Please try again."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(StorefrontError):
    default_message = "Please fill in all fields"


class GatewayError(StorefrontError):
    default_message = "The server could not be reached"


class NetworkError(GatewayError):
    pass


class GatewayTimeoutError(GatewayError):
    default_message = "The server took too long to respond"


class HttpError(GatewayError):
    def __init__(self, status, message=None):
        self.status = status
        super().__init__(message)


class ServiceUnavailableError(HttpError):
    default_message = "Service temporarily unavailable. Please try again later."


class AlreadyExistsError(StorefrontError):
    default_message = "User already exists"


class InvalidCredentialsError(StorefrontError):
    default_message = "Invalid email or password"


class UnexpectedError(StorefrontError):
    pass
