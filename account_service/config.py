"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings
from typing import List


class AccountServiceConfig(BaseSettings):
    """Account service configuration"""

    # Storage configuration
    storage_backend: str = "sqlite"  # sqlite or memory
    sqlite_path: str = "account_service.db"

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    # Business rules configuration
    max_accounts_per_user: int = 10
    optimistic_locking: bool = False  # Reject account saves whose version moved

    # Users created when the user table is empty
    seed_user_names: str = "Pobi,Lupi,Harry"

    class Config:
        env_prefix = "ACCOUNT_SERVICE_"
        env_file = ".env"
        case_sensitive = False

    @property
    def seed_users(self) -> List[str]:
        return [name.strip() for name in self.seed_user_names.split(",") if name.strip()]


# Global configuration instance
config = AccountServiceConfig()


def get_config() -> AccountServiceConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> AccountServiceConfig:
    """Reload configuration from environment"""
    global config
    config = AccountServiceConfig()
    return config
