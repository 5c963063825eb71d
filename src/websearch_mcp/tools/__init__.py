"""Tool contracts, registry, dispatch and adapter definitions."""
