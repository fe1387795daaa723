"""Domain layer — request types, handler contracts, and the error hierarchy.

This layer depends only on the stdlib.
It must never import from services, infrastructure, commands, or config.
"""
