"""Adapters for STREAMSTORE.

Concrete implementations of the ports in `streamstore.interfaces`, backed by
SQLAlchemy.
"""
