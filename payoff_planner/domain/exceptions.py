"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class AdvisoryAPIError(DomainException):
    """Advisory endpoint is unavailable or returned an unusable response"""

    pass
