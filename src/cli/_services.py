"""Service wiring shared by CLI commands."""

from collections.abc import Iterator
from contextlib import contextmanager

from src.directory_bridge.core.services import DbSessionService, IdentityStore
from src.directory_bridge.runtime.context import get_config


@contextmanager
def identity_store() -> Iterator[IdentityStore]:
    db = DbSessionService(get_config()).get_session()
    try:
        yield IdentityStore(db)
    finally:
        db.close()
