"""Core app configuration, security primitives and database."""

from posada.core.config import Config, get_config, get_settings, load_config
from posada.core.database import get_db

__all__ = ["Config", "get_config", "get_settings", "get_db", "load_config"]
