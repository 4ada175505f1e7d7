"""Shared SQLAlchemy `MetaData` for the registry tables.

The stream and projection registries attach to this metadata so their
constraints and indexes receive deterministic names. Per-stream event tables
are built on their own `MetaData` (see `adapters.eventstore.schema`) because
their names are only known at runtime; they reuse the same convention.

Naming convention:
    - Indexes:       ix_<table>_<col...>
    - Unique:        uq_<table>_<col...>
    - Check:         ck_<table>_<constraint_name>
    - Primary key:   pk_<table>
"""

from sqlalchemy import MetaData

NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_N_label)s",
    "uq": "uq_%(table_name)s_%(column_0_N_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "pk": "pk_%(table_name)s",
}

#: Registry metadata with enforced naming convention.
metadata = MetaData(naming_convention=NAMING_CONVENTION)
