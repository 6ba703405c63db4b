"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class NoAccountsError(DomainException):
    """Projection requested without any account to anchor balances"""

    pass


class InvalidWindowError(DomainException):
    """Projection window ends before it starts or has no days"""

    pass


class UnknownFrequencyError(DomainException):
    """Recurrence frequency is not one of the supported values"""

    pass


class UnknownAccountError(DomainException):
    """Record references an account that was not supplied"""

    pass


class InvalidTransferError(DomainException):
    """Transfer source and destination are the same account"""

    pass


class InvalidRecordError(DomainException):
    """Source row is malformed or missing required fields"""

    pass
