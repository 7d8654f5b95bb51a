"""
Token authentication for the clinic API.

Kept in its own module, apart from any view definitions, so that DRF can
import the authentication classes during initialisation without pulling
in views and creating circular imports.
"""
from __future__ import annotations

from rest_framework import authentication


class TokenAuthentication(authentication.TokenAuthentication):
    """DRF token authentication with a pinned ``Token`` keyword.

    Front-end clients send ``Authorization: Token <key>``.  JWT bearer
    tokens are accepted separately through simplejwt.
    """

    keyword = 'Token'
