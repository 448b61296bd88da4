"""
Configuration Package

Settings, constants and the provider registry builder.
"""

from .constants import CACHE_PROVENANCE, HEADER_REQUEST_ID, LLMProvider, Stage
from .settings import Settings, get_settings, reload_settings

__all__ = [
    "Settings",
    "get_settings",
    "reload_settings",
    "Stage",
    "LLMProvider",
    "CACHE_PROVENANCE",
    "HEADER_REQUEST_ID",
]
