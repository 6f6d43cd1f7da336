"""Compensation block classification and movement propagation engine."""

from .app import create_app

__all__ = ["create_app"]
