"""
Error kinds raised by the lookup operations.

Each carries the HTTP status the API layer answers with. Duplicate
selections are not errors: they surface as notices (see app.state.notices).
"""
from __future__ import annotations


class SiteBuilderError(Exception):
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class Unauthenticated(SiteBuilderError):
    status_code = 401


class ConfigError(SiteBuilderError):
    status_code = 500


class ProviderError(SiteBuilderError):
    status_code = 502


class InvalidArgument(SiteBuilderError):
    status_code = 400
