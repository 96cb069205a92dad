"""HTTP API consumed by the dashboard front end."""

from macrodash.api.app import create_app

__all__ = ["create_app"]
