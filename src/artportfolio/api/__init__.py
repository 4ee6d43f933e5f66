"""Art Portfolio API: FastAPI REST API layer.

This package contains the FastAPI application, Pydantic request/response
models, validation, and the file-backed record and image stores.

Modules
-------
main
    FastAPI application factory, route handlers and the ``main()`` CLI
    entry point.
models
    Pydantic models for API request and response shapes.
artwork_store
    JSON-document record store, status filtering and pagination helpers.
image_assets
    Uploaded image storage and best-effort cleanup.
validation
    Field validation for create and update requests.
errors
    Exception taxonomy mapped onto HTTP error responses.
"""
