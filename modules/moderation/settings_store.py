"""
Settings Store - Paramètres clé/valeur (strings)

Seule clé réellement utilisée: requests_open ("true" / "false").
"""

import logging
from typing import Dict, Optional

LOGGER = logging.getLogger(__name__)

REQUESTS_OPEN = "requests_open"

DEFAULT_SETTINGS = {
    REQUESTS_OPEN: "true",
}


class SettingsStore:
    """Store clé/valeur en mémoire, last-write-wins."""

    def __init__(self, defaults: Optional[Dict[str, str]] = None):
        self._settings: Dict[str, str] = dict(DEFAULT_SETTINGS if defaults is None else defaults)

    def get(self, key: str) -> Optional[str]:
        return self._settings.get(key)

    def set(self, key: str, value: str) -> None:
        self._settings[key] = value
        LOGGER.debug(f"⚙️ Setting {key} = {value}")
