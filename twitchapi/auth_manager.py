#!/usr/bin/env python3
"""
AuthManager
Authentification du compte bot (User Token) pour le chat Twitch
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from twitchAPI.twitch import Twitch
from twitchAPI.type import AuthScope

LOGGER = logging.getLogger(__name__)

BOT_SCOPES = [AuthScope.CHAT_READ, AuthScope.CHAT_EDIT]


@dataclass
class TokenInfo:
    """Identifiants du bot"""
    user_login: str                                      # Nom du compte bot
    access_token: str                                    # Token (sans "oauth:")
    channels: list[str] = field(default_factory=list)    # Channels à rejoindre

    @classmethod
    def from_credentials(
        cls,
        username: Optional[str],
        token: Optional[str],
        channels: list[str]
    ) -> Optional["TokenInfo"]:
        """
        Construit un TokenInfo, ou None si un identifiant manque.

        Le préfixe "oauth:" (format tmi/IRC) est retiré du token.
        """
        channels = [c.strip().lower().lstrip('#') for c in channels if c and c.strip()]
        if not username or not token or not channels:
            return None

        if token.startswith("oauth:"):
            token = token[len("oauth:"):]

        return cls(user_login=username.lower(), access_token=token, channels=channels)


class AuthManager:
    """
    Crée l'instance Twitch authentifiée avec le User Token du bot.
    Pas de refresh: le token est fourni tel quel par la config.
    """

    def __init__(self, client_id: str):
        self.client_id = client_id
        LOGGER.info("AuthManager initialisé")

    async def create_bot_twitch(self, token: TokenInfo) -> Twitch:
        """
        Returns:
            Instance Twitch avec user authentication (scopes chat)

        Raises:
            Les erreurs twitchAPI (token invalide, réseau) remontent à l'appelant
        """
        twitch = await Twitch(self.client_id, authenticate_app=False)
        twitch.auto_refresh_auth = False
        await twitch.set_user_authentication(
            token=token.access_token,
            scope=BOT_SCOPES,
            validate=True
        )
        LOGGER.info(f"✅ User authentication set pour {token.user_login}")
        return twitch
