"""Error taxonomy for the curation core."""


class CurationError(Exception):
    """Base class for all curation errors."""


class InvalidInputError(CurationError, ValueError):
    """Caller input is malformed or out of range."""


class NoEligiblePoolsError(InvalidInputError):
    """No pool in the catalog qualifies for the requested risk tier."""

    def __init__(self, message: str = "No eligible pools for the requested risk tolerance"):
        super().__init__(message)


class NoPoolResultsError(InvalidInputError):
    """Every requested pool came back without historical data."""

    def __init__(self, message: str = "No pools produced results"):
        super().__init__(message)


class UpstreamError(CurationError):
    """The external market data source failed."""
