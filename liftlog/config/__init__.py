"""Application configuration module.

- **settings.py**: Environment-based settings (Pydantic BaseSettings)
  - Database URL, auth-provider JWT verification, clone job tuning
  - Loaded from .env file via pydantic-settings
"""
from liftlog.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
