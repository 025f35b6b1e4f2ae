"""Application layer: ports, schema introspection, and the population engine."""
