"""Infrastructure layer — the handler registry.

This layer may import from domain but never from services, commands, or output.
"""
