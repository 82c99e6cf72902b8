"""FastAPI dependency helpers."""
from .billing import get_clock, get_price_table
from .database import get_db

__all__ = ["get_clock", "get_db", "get_price_table"]
