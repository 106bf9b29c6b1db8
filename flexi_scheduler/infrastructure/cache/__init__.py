from .cached_gateway import CachedPersistenceGateway

__all__ = ["CachedPersistenceGateway"]
