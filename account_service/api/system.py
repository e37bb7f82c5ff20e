"""
Service container and FastAPI dependency
"""

from typing import Optional

from ..storage import StorageInterface, InMemoryStorage, SQLiteStorage
from ..users import AccountUserRepository
from ..accounts import AccountRepository, AccountManager
from ..transactions import TransactionRepository, TransactionEngine
from ..config import AccountServiceConfig, get_config
from ..logging_config import get_logger


class AccountSystem:
    """Account service with all components initialized"""

    def __init__(self, config: Optional[AccountServiceConfig] = None,
                 storage: Optional[StorageInterface] = None):
        self.config = config or get_config()

        # Initialize storage
        if storage is not None:
            self.storage = storage
        elif self.config.storage_backend == "memory":
            self.storage = InMemoryStorage()
        else:
            self.storage = SQLiteStorage(self.config.sqlite_path)

        self.user_repository = AccountUserRepository(self.storage)
        self.account_repository = AccountRepository(self.storage)
        self.transaction_repository = TransactionRepository(self.storage)

        self.account_manager = AccountManager(
            self.storage, self.user_repository, self.account_repository,
            max_accounts_per_user=self.config.max_accounts_per_user
        )
        self.transaction_engine = TransactionEngine(
            self.storage, self.user_repository, self.account_repository,
            self.transaction_repository,
            optimistic_locking=self.config.optimistic_locking
        )

    def seed_users(self) -> None:
        """Create the configured users when no user exists yet"""
        if self.user_repository.count() > 0:
            return
        logger = get_logger("account_service.system")
        for name in self.config.seed_users:
            user = self.user_repository.create(name)
            logger.info(f"Seeded user {user.id}: {user.name}")

    def close(self) -> None:
        self.storage.close()


# Global account system instance, created on first use
account_system: Optional[AccountSystem] = None


def get_account_system() -> AccountSystem:
    global account_system
    if account_system is None:
        account_system = AccountSystem()
        account_system.seed_users()
    return account_system
