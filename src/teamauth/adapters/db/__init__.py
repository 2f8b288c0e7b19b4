"""Store adapters."""

from teamauth.adapters.db.app_db import AppDatabase
from teamauth.adapters.db.memory import InMemoryAuthRepository

__all__ = ["AppDatabase", "InMemoryAuthRepository"]
