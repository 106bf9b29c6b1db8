"""Persistence gateway implementations."""

from .memory_gateway import InMemoryPersistenceGateway
from .sql_gateway import SqlPersistenceGateway, create_db_engine

__all__ = ["InMemoryPersistenceGateway", "SqlPersistenceGateway", "create_db_engine"]
