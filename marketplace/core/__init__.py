# Core modules

from .config import settings, get_settings, Settings
from .logging import setup_logging

__all__ = ["settings", "get_settings", "Settings", "setup_logging"]
