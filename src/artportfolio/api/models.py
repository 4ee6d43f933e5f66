"""Pydantic request and response models for the Art Portfolio API.

Records are persisted with camelCase keys (``createdDate``, ``createdAt``,
``updatedAt``), so every model declares camelCase aliases and accepts either
spelling on input.  FastAPI serialises response models by alias, which keeps
the wire format identical to the stored JSON document.

Models
------
ArtworkFields
    Cleaned, typed user-editable fields produced by the validation layer.
Artwork
    A full stored record, used as the response model for single artworks.
Pagination
    Metadata returned alongside a page of artworks.
ArtworkPage
    Response body of ``GET /artworks``.
DeleteResponse
    Response body of ``DELETE /artworks/{id}``.
ErrorResponse
    Shape of every error body, used for OpenAPI documentation.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ArtworkFields(BaseModel):
    """User-editable artwork fields after validation.

    Attributes:
        title: Artwork title, trimmed.
        description: Free-text description, trimmed.
        category: Category label (painting, sculpture, ...), trimmed.
        origin: Country, city or region the work comes from, trimmed.
        artist: Artist name, trimmed.
        created_date: Date the work was made, as supplied by the caller.
        status: ``0`` for draft/inactive, ``1`` for published/active.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    origin: str = Field(..., min_length=1)
    artist: str = Field(..., min_length=1)
    created_date: str = Field(..., alias="createdDate")
    status: int = Field(..., ge=0, le=1)

    def to_record(self) -> dict:
        """Return the fields keyed the way the record document stores them."""
        return self.model_dump(by_alias=True)


class Artwork(ArtworkFields):
    """A stored artwork record.

    Attributes:
        id: Server-generated UUID.
        image: Fully-qualified URL of the stored image under ``/uploads``.
        created_at: ISO 8601 creation timestamp.
        updated_at: ISO 8601 timestamp of the last update.
    """

    id: str
    image: str
    created_at: str | None = Field(default=None, alias="createdAt")
    updated_at: str | None = Field(default=None, alias="updatedAt")


class Pagination(BaseModel):
    """Pagination metadata for ``GET /artworks``."""

    page: int
    limit: int
    total: int
    pages: int


class ArtworkPage(BaseModel):
    """One page of artworks plus pagination metadata."""

    data: list[Artwork]
    pagination: Pagination


class DeleteResponse(BaseModel):
    """Confirmation returned after deleting an artwork."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = "Artwork deleted successfully"
    deleted_artwork: Artwork = Field(..., alias="deletedArtwork")


class ErrorResponse(BaseModel):
    """Error body: an ``error`` category plus ``message`` or ``details``."""

    error: str
    message: str | None = None
    details: list[str] | None = None
