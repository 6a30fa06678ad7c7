"""
Database module initialization
"""

from .postgres import db, connect_to_postgres, close_postgres_connection, get_pool, ping

__all__ = [
    "db",
    "connect_to_postgres",
    "close_postgres_connection",
    "get_pool",
    "ping",
]
