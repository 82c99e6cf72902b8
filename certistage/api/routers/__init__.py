"""Expose API routers."""
from . import billing

__all__ = ["billing"]
