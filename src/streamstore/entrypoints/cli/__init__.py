"""STREAMSTORE command-line interface."""
