"""
Repository Interfaces

Contains the abstract persistence contract for the scheduling catalogs.
The actual implementations are provided in the infrastructure layer.
"""

from .persistence_gateway import PersistenceGateway

__all__ = ["PersistenceGateway"]
