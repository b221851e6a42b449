"""
twitchapi/
==========

Module dédié à TOUTE la gestion de l'API Twitch.

Organisation:
- auth_manager.py : User Token du bot → instance Twitch authentifiée
- transports/ : Clients API Twitch
  - irc_client.py : IRC Twitch (chat)

Philosophie:
- Séparation claire : core/ + modules/ = logique slot-ban, twitchapi/ = Twitch-specific
- Testable : Code Twitch isolé = mocking facile
"""

from twitchapi.auth_manager import AuthManager, TokenInfo

__all__ = ["AuthManager", "TokenInfo"]
