"""Configuration management using pydantic-settings"""

import logging
from pathlib import Path

import toml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and config.toml"""

    model_config = SettingsConfigDict(
        toml_file='config.toml',
        env_prefix='SUBSHELF_',
        case_sensitive=False,
        extra='ignore',
    )

    # Relation data settings
    relations_url: str = Field(
        default='https://raw.githubusercontent.com/erengy/anime-relations/master/anime-relations.txt',
        description='Upstream anime-relations rule file',
    )
    api_base_url: str = Field(
        default='http://localhost:8000', description='Base URL of the server that serves the relation table'
    )
    relations_check_interval: int = Field(
        default=300, description='Seconds between last_modified checks of the cached relation table'
    )

    # HTTP settings
    proxy: str | None = Field(default=None, description='Proxy URL (e.g., socks5://host:port)')
    timeout: int = Field(default=30, description='Request timeout in seconds')

    # Logging settings
    log_prefix: str = Field(default='subshelf', description='Log prefix for logger names')
    log_level: int = Field(default=logging.INFO, description='Logging level')

    @field_validator('log_level', mode='before')
    @classmethod
    def parse_log_level(cls, v: str | int) -> int:
        """Parse log level from string or int"""
        if isinstance(v, str):
            return getattr(logging, v.upper(), logging.INFO)
        return v

    @classmethod
    def from_toml(cls, config_path: str | Path = 'config.toml') -> 'Settings':
        """Load settings from TOML file"""
        config_path = Path(config_path)
        if not config_path.is_absolute():
            # Look for config.toml in project root
            project_root = Path(__file__).parent.parent.parent
            config_path = project_root / config_path

        if config_path.exists():
            config_data = toml.load(config_path)
            return cls(**config_data)
        # If no config file, try to load from environment
        return cls()


# Global settings instance
settings = Settings.from_toml()
