"""
Tests for storage backends and transaction support
"""

import pytest
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from account_service.storage import (
    InMemoryStorage, SQLiteStorage, StorageError, RecordMetadata
)
from account_service.users import AccountUserRepository


# Test data
test_data = {
    "id": "test_001",
    "account_number": "1000000000",
    "balance": 100,
    "created_at": datetime.now(timezone.utc).isoformat(),
    "updated_at": datetime.now(timezone.utc).isoformat()
}


@pytest.fixture(params=["memory", "sqlite"])
def storage(request):
    if request.param == "memory":
        backend = InMemoryStorage()
        yield backend
        backend.close()
    else:
        with tempfile.TemporaryDirectory() as temp_dir:
            backend = SQLiteStorage(Path(temp_dir) / "test.db")
            yield backend
            backend.close()


class TestStorageBackends:
    """Behaviour shared by every backend"""

    def test_basic_operations(self, storage):
        storage.save("test_table", "record_1", test_data)
        assert storage.load("test_table", "record_1") == test_data
        assert storage.load("test_table", "missing") is None

        storage.save("test_table", "record_2", {"id": "record_2", "account_number": "1000000001", "balance": 5})
        assert len(storage.load_all("test_table")) == 2
        assert storage.count("test_table") == 2

    def test_find_by_string_and_int(self, storage):
        storage.save("test_table", "record_1", test_data)
        storage.save("test_table", "record_2", {"id": "record_2", "account_number": "1000000001", "balance": 5})

        by_number = storage.find("test_table", {"account_number": "1000000001"})
        assert [r["id"] for r in by_number] == ["record_2"]

        by_balance = storage.find("test_table", {"balance": 100})
        assert [r["id"] for r in by_balance] == ["test_001"]

        assert storage.find("test_table", {"balance": 7}) == []
        assert len(storage.find("test_table", {})) == 2

    def test_save_overwrites(self, storage):
        storage.save("test_table", "record_1", test_data)
        storage.save("test_table", "record_1", dict(test_data, balance=50))

        assert storage.count("test_table") == 1
        assert storage.load("test_table", "record_1")["balance"] == 50

    def test_atomic_commit(self, storage):
        with storage.atomic():
            storage.save("test_table", "record_1", test_data)
            storage.save("other_table", "record_1", test_data)

        assert storage.load("test_table", "record_1") is not None
        assert storage.load("other_table", "record_1") is not None

    def test_atomic_rollback(self, storage):
        storage.save("test_table", "record_1", test_data)

        with pytest.raises(RuntimeError):
            with storage.atomic():
                storage.save("test_table", "record_1", dict(test_data, balance=0))
                storage.save("test_table", "record_2", {"id": "record_2"})
                raise RuntimeError("boom")

        assert storage.load("test_table", "record_1")["balance"] == 100
        assert storage.load("test_table", "record_2") is None


class TestSQLiteStorage:

    def test_persists_across_connections(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            db_path = Path(temp_dir) / "test.db"
            storage = SQLiteStorage(db_path)
            storage.save("test_table", "record_1", test_data)
            storage.close()

            reopened = SQLiteStorage(db_path)
            assert reopened.load("test_table", "record_1") == test_data
            reopened.close()

    def test_sqlite_errors_become_storage_errors(self):
        storage = SQLiteStorage()

        with pytest.raises(StorageError):
            storage.save("bad table name", "record_1", test_data)

        storage.close()


class TestRecordMetadata:

    def test_round_trip(self):
        meta = RecordMetadata.now()
        assert RecordMetadata.from_dict(meta.to_dict()) == meta

    def test_touch_moves_updated_at_only(self):
        meta = RecordMetadata.now()
        created_at = meta.created_at

        meta.touch()

        assert meta.created_at == created_at
        assert meta.updated_at >= created_at


class TestAccountUserRepository:

    def test_create_assigns_sequential_ids(self):
        users = AccountUserRepository(InMemoryStorage())

        pobi = users.create("Pobi")
        harry = users.create("Harry")

        assert (pobi.id, harry.id) == (1, 2)
        assert users.find_by_id(2).name == "Harry"
        assert users.find_by_id(3) is None
        assert users.count() == 2
