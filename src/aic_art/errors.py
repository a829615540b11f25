"""Error taxonomy for aic-art."""

from typing import Optional


class AicError(Exception):
    """Base class for every error the CLI turns into a message and exit code."""

    exit_code = 1


class InvalidTerminalState(AicError):
    """Terminal dimensions are unusable (e.g. zero columns)."""


class ConversionError(AicError):
    """The image-to-cells converter failed or produced no output."""


class DecodeError(AicError):
    """The converter's encoding is malformed."""

    def __init__(self, message: str, row: Optional[int] = None):
        self.row = row
        if row is not None:
            message = f"row {row}: {message}"
        super().__init__(message)


class NoImageAvailable(AicError):
    """The selected artwork has no preferred image.

    Carries the caption so the caller can still print it.
    """

    def __init__(self, caption=None):
        self.caption = caption
        super().__init__("Unfortunately, this artwork has no preferred image.")


class ApiError(AicError):
    """The AIC API or IIIF image server did not answer with HTTP 200."""


class NoResults(AicError):
    def __init__(self):
        super().__init__("Sorry, we couldn't find any results matching your criteria.")


class QueryError(AicError):
    """A query template is missing, invalid, or lacks a needed placeholder."""
