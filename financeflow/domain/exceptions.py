"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class DataServiceError(DomainException):
    """Hosted data service rejected a request or could not be reached"""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


class AuthenticationError(DomainException):
    """Credentials were rejected by the auth provider"""

    pass


class InvalidRowError(DomainException):
    """Row returned by the data service is malformed"""

    pass
