"""Routers module - FastAPI route handlers"""

from . import config, diff, versions

__all__ = ["config", "diff", "versions"]
