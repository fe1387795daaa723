"""CLI output — Rich console and per-command renderers."""
