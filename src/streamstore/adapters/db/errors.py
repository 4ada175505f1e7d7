"""Translation of SQLAlchemy and driver errors into event store errors."""

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from streamstore.interfaces.errors import StorageFailure


def error_message(error: SQLAlchemyError) -> str:
    """The driver's message when there is one, else SQLAlchemy's."""
    return str(getattr(error, "orig", None) or error)


@contextmanager
def storage_errors() -> Iterator[None]:
    """Re-raise any SQLAlchemy error escaping the block as `StorageFailure`.

    This covers driver errors as well as statement errors raised before the
    driver is reached, such as a missing bind value. Event store errors
    raised inside the block pass through unchanged.
    """
    try:
        yield
    except SQLAlchemyError as e:
        raise StorageFailure(error_message(e)) from e
