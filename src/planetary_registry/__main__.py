#!/usr/bin/env python3
"""Entry point for planetary-registry-mcp server."""

from planetary_registry.server import run

if __name__ == "__main__":
    run()
