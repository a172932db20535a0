# core/exceptions.py


class FitCoachError(Exception):
    """Base class for errors raised by the service layer."""


class InputValidationError(FitCoachError):
    """Malformed or missing request fields (HTTP 400)."""


class GenerationError(FitCoachError):
    """The text-generation call failed or returned an unusable payload (HTTP 500)."""


class DomainError(FitCoachError):
    """A domain rule rejected the operation; reported as a logical failure."""


class NotFoundError(DomainError):
    pass


class ConflictError(DomainError):
    pass


class PrimaryLiftError(DomainError):
    def __init__(self, message: str, suggestion: str | None = None):
        super().__init__(message)
        self.suggestion = suggestion
