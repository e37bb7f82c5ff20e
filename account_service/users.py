"""
Account User Module

Identity that owns accounts. Users are created by seeding or by an external
identity service; the core only ever looks them up.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .storage import StorageInterface, RecordMetadata


@dataclass(frozen=True)
class AccountUser:
    """Owner of zero or more accounts"""
    id: int
    name: str
    meta: RecordMetadata

    def to_dict(self) -> Dict[str, Any]:
        result = {"id": self.id, "name": self.name}
        result.update(self.meta.to_dict())
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AccountUser':
        return cls(
            id=int(data["id"]),
            name=data["name"],
            meta=RecordMetadata.from_dict(data),
        )


class AccountUserRepository:
    """Lookup and registration of account users"""

    def __init__(self, storage: StorageInterface, table_name: str = "account_users"):
        self.storage = storage
        self.table_name = table_name

    def find_by_id(self, user_id: int) -> Optional[AccountUser]:
        data = self.storage.load(self.table_name, str(user_id))
        if data:
            return AccountUser.from_dict(data)
        return None

    def save(self, user: AccountUser) -> AccountUser:
        self.storage.save(self.table_name, str(user.id), user.to_dict())
        return user

    def create(self, name: str) -> AccountUser:
        """Register a user under the next free integer id"""
        existing = self.storage.load_all(self.table_name)
        next_id = max((int(record["id"]) for record in existing), default=0) + 1
        return self.save(AccountUser(id=next_id, name=name, meta=RecordMetadata.now()))

    def count(self) -> int:
        return self.storage.count(self.table_name)
