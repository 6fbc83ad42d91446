"""Routing: a segment trie compiled from the registered routes.

Static segments take precedence over ``{param}`` segments at every depth,
so ``/{name}`` and ``/{section}/{name}`` never shadow each other.
"""
