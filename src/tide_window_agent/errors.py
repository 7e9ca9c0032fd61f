"""Error hierarchy for tide window checks.

Parsing and schedule validation errors propagate to the caller. Provider
errors are caught per date by the aggregator and turned into degraded
verdicts so one bad date never sinks a whole batch.
"""


class TideWindowError(Exception):
    """Base exception for the tide window agent."""


class FormatError(TideWindowError, ValueError):
    """Malformed time or date text.

    Raised by the parsing helpers instead of silently defaulting.
    """


class InvalidSpec(TideWindowError, ValueError):
    """Structurally invalid schedule or activity window.

    Examples: empty day set, inverted date range, stride below one day.
    """


class ProviderError(TideWindowError):
    """Tide data provider failure or missing predictions for a date."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class TransientProviderError(ProviderError):
    """Temporary provider failure that may succeed on retry.

    Examples: connection resets, 503 Service Unavailable, 429 rate limits.
    """
