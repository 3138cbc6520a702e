"""Wrenchlog: a personal vehicle-maintenance tracker."""

from .factory import create_app

__all__ = ["create_app"]
