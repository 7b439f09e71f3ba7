"""A TCP chat server that relays JSON chat messages to connected clients."""

__version__ = "0.1.0"