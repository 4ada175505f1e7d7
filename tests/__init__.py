"""STREAMSTORE test suite.

Layout
- unit/         : one module at a time, no database beyond in-memory SQLite.
- integration/  : schema, registry and writer against SQLite and PostgreSQL.
- contract/     : port behavior run against every supported backend.
- functional/   : the ``streamstore`` CLI driven through ``CliRunner``.
- fixtures/     : engine and test-data fixtures, loaded from ``conftest.py``.
- helpers/      : shared utilities (no tests here).

Each directory marks its tests with its own name (see ``helpers/markers.py``);
PostgreSQL-backed tests are skipped when Docker is not available.
"""
