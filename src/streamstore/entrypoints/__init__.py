"""Entrypoints for STREAMSTORE (command-line interface)."""
