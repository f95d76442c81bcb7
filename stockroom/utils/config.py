"""Configuration management using pydantic-settings."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "config.yml"


class InventoryConfig(BaseModel):
    """Inventory reporting settings."""
    low_stock_threshold: int = Field(default=10, ge=0)


class AuthConfig(BaseModel):
    """Credential store settings."""
    min_password_length: int = Field(default=6, ge=1)
    hash_iterations: int = Field(default=260000, ge=1)

    # Development convenience: created only when the user store is empty
    bootstrap_default_account: bool = True
    default_username: str = "admin"
    default_password: str = "admin123"


class LoggingFilesConfig(BaseModel):
    """Log file paths."""
    inventory: str = "logs/inventory.log"
    auth: str = "logs/auth.log"
    storage: str = "logs/storage.log"
    error: str = "logs/error.log"


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "INFO"
    console_level: str = "WARNING"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    max_bytes: int = 1048576  # 1MB
    backup_count: int = 3
    files: LoggingFilesConfig = LoggingFilesConfig()


class YAMLConfig(BaseModel):
    """Configuration loaded from YAML file."""
    inventory: InventoryConfig = InventoryConfig()
    auth: AuthConfig = AuthConfig()
    logging: LoggingConfig = LoggingConfig()


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Store files
    products_file: str = Field(default="inventory.dat", description="Product snapshot file")
    users_file: str = Field(default="users.dat", description="Credential snapshot file")

    # Application settings
    environment: str = Field(default="development", description="Environment (development/production)")
    log_level: Optional[str] = Field(default=None, description="Override log level")
    log_to_file: bool = Field(default=True, description="Write rotating log files")
    config_file: Optional[str] = Field(default=None, description="Path to YAML config")

    model_config = SettingsConfigDict(
        env_prefix="STOCKROOM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


def load_yaml_config(config_path: Path) -> YAMLConfig:
    """
    Load and validate a YAML configuration file.

    Args:
        config_path: Path to the YAML file

    Returns:
        Parsed configuration, defaults when the file does not exist

    Raises:
        ConfigurationError: If the file is not valid YAML or fails validation
    """
    if not config_path.exists():
        return YAMLConfig()

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f) or {}
        return YAMLConfig(**yaml_data)
    except (yaml.YAMLError, ValidationError, TypeError) as e:
        raise ConfigurationError(
            f"Invalid configuration file: {config_path}",
            details={"path": str(config_path), "error": str(e)}
        )


class AppConfig:
    """Combined application configuration."""

    def __init__(self):
        self.env = Settings()

        config_path = Path(self.env.config_file) if self.env.config_file else DEFAULT_CONFIG_PATH
        self.yaml = load_yaml_config(config_path)

        # Override log level if specified in env
        if self.env.log_level:
            self.yaml.logging.level = self.env.log_level

    @property
    def inventory(self) -> InventoryConfig:
        return self.yaml.inventory

    @property
    def auth(self) -> AuthConfig:
        return self.yaml.auth

    @property
    def logging(self) -> LoggingConfig:
        return self.yaml.logging

    @property
    def is_production(self) -> bool:
        return self.env.environment.lower() == "production"


@lru_cache()
def get_config() -> AppConfig:
    """Get cached configuration instance."""
    return AppConfig()
