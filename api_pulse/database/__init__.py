"""Database module for API Pulse."""

from api_pulse.database.base import Base
from api_pulse.database.session import build_database, create_tables

__all__ = ["Base", "build_database", "create_tables"]
