"""Contract tests for the event store and projection store ports.

Every test takes a backend-parametrized fixture, so one assertion checks the
same observable behavior on in-memory SQLite, file SQLite and PostgreSQL.
"""
