from __future__ import annotations

import pytest

from matzip.db.connection import PersistenceStore
from matzip.services import DataAccessService


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "matzip-test.sqlite3"


@pytest.fixture
def store(db_path):
    s = PersistenceStore(db_path, debug=True)
    yield s
    s.close()


@pytest.fixture
def data(store):
    return DataAccessService(store)
