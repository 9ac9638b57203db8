"""Database management for the Code Intelligence Digest."""

from .connection import DatabaseConfig, create_pool, get_connection
from .init import init_database, validate_connection
from .scores import PostgresScoreStore
from .selections import save_digest_selections

__all__ = [
    "DatabaseConfig",
    "PostgresScoreStore",
    "create_pool",
    "get_connection",
    "init_database",
    "save_digest_selections",
    "validate_connection",
]
