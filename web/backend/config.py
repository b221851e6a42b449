#!/usr/bin/env python3
"""
Configuration centralisée (secrets + environnement).

Les réglages non secrets (durée des bans, réponses chat...) sont dans
config/config.yaml.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration via variables d'environnement (ou .env)."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Twitch (bot)
    twitch_client_id: str = ""
    twitch_username: str = ""
    twitch_token: str = ""
    twitch_channels: str = ""   # "chan1,chan2"

    # Serveur
    host: Optional[str] = None
    port: Optional[int] = None
    debug: bool = False

    @property
    def channel_list(self) -> List[str]:
        return [c.strip() for c in self.twitch_channels.split(",") if c.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Singleton settings."""
    return Settings()
