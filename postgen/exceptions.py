"""
Exception types raised by the post generator.

Asset and font problems are never raised; they degrade to placeholders
and are only logged. What remains here are programming errors and
irrecoverable delivery failures.
"""


class PostgenError(Exception):
    """Base class for post generator errors."""


class UnknownFormat(PostgenError, LookupError):
    """Format id is not in the format table."""

    def __init__(self, format_id):
        self.format_id = format_id
        super().__init__(f"Unknown format: {format_id!r}")


class PipelineBusy(PostgenError):
    """A render/delivery request is already in flight."""


class DeliveryError(PostgenError):
    """A file could not be handed to the user."""

    def __init__(self, message: str, filename: str = None):
        self.filename = filename
        super().__init__(message)
