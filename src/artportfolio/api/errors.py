"""Exception taxonomy for the Art Portfolio API.

Every error the API reports on purpose is an :class:`ArtworkAPIError`
subclass.  Each carries the HTTP status it maps to, a short ``error``
category and either a human-readable ``message`` or a list of ``details``.
The exception handlers registered in :mod:`artportfolio.api.main` turn these
into JSON bodies via :meth:`ArtworkAPIError.to_dict`.
"""

from __future__ import annotations


class ArtworkAPIError(Exception):
    """Base class for errors rendered as ``{"error": ..., "message": ...}``."""

    status_code: int = 500
    error: str = "Internal server error"
    message: str = "An unexpected error occurred on the server"

    def __init__(
        self,
        message: str | None = None,
        *,
        error: str | None = None,
        details: list[str] | None = None,
    ) -> None:
        if message is not None:
            self.message = message
        if error is not None:
            self.error = error
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Return the JSON response body for this error."""
        body: dict = {"error": self.error}
        if self.details is not None:
            body["details"] = list(self.details)
        else:
            body["message"] = self.message
        return body


class ValidationError(ArtworkAPIError):
    """One or more submitted fields are missing or out of domain."""

    status_code = 400
    error = "Validation failed"
    message = "One or more fields are invalid"

    def __init__(self, details: list[str]) -> None:
        super().__init__(details=details)


class NotFoundError(ArtworkAPIError):
    """No artwork exists with the requested identifier."""

    status_code = 404
    error = "Artwork not found"
    message = "No artwork exists with the given ID"


class UploadError(ArtworkAPIError):
    """The image upload was missing, malformed, too large or of the wrong type."""

    status_code = 400
    error = "Upload error"
    message = "The uploaded file could not be processed"


class StoreError(ArtworkAPIError):
    """The record document could not be read, parsed or written.

    The client only ever sees the generic internal-error message; the
    underlying cause is kept in ``__cause__`` for server-side logging.
    """

    status_code = 500

    def to_dict(self) -> dict:
        return {"error": self.error, "message": ArtworkAPIError.message}
