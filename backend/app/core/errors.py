"""Failure types raised by the catalog services.

Each error carries the HTTP status it maps to so the API layer can shape a
``{"error": ...}`` body without knowing which service raised it.
"""


class CatalogError(Exception):
    status_code = 500

    def __init__(self, message: str, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(CatalogError):
    status_code = 400


class Unauthorized(CatalogError):
    status_code = 401


class NotFound(CatalogError):
    status_code = 404


class StoreError(CatalogError):
    status_code = 500


class ServerMisconfigured(CatalogError):
    status_code = 500


class UpstreamAssetError(CatalogError):
    status_code = 502
