"""Infrastructure adapters: persistence gateways, read cache and event bus."""
