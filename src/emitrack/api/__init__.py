"""HTTP API for emitrack."""

from emitrack.api.app import create_app

__all__ = ["create_app"]
