"""STREAMSTORE

Relational storage for event-sourced applications. Logical event streams and
named projections are mapped onto SQL tables, with append-only, optimistically
concurrent writes and a lazily paginated read path.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
