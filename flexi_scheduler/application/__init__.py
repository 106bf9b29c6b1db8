"""Application layer: command dispatch and use-case services."""
