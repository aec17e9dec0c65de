"""
Config package for sheetdash.

Responsible for:
- config models (GlobalConfig, Credentials, AppSettings)
- config I/O helpers (load_global_config / load_credentials / load_settings)
"""

from .model import AppSettings, Credentials, GlobalConfig
from .loader import load_credentials, load_global_config, load_settings

__all__ = [
    "AppSettings",
    "Credentials",
    "GlobalConfig",
    "load_credentials",
    "load_global_config",
    "load_settings",
]
