from __future__ import annotations


class PlannerError(Exception):
    def __init__(self, message: str, status_code: int = 500) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class InvalidRequestError(PlannerError):
    """A required field is missing or a request invariant does not hold."""

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code=status_code)


class ResolutionFailure(PlannerError):
    """A map link could not be turned into an address; ask for manual entry."""

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code=status_code)


class UpstreamError(PlannerError):
    def __init__(self, message: str, status_code: int = 500) -> None:
        super().__init__(message, status_code=status_code)


class NetworkError(UpstreamError):
    pass


class MapsAuthError(UpstreamError):
    pass


class MapsConfigurationError(UpstreamError):
    pass


class RateLimitError(UpstreamError):
    pass
