"""
Token authentication for the portal API.

Kept separate from the view modules so that DRF can import the
authentication classes at start-up without pulling in views and
causing circular imports.
"""
from __future__ import annotations

from rest_framework import authentication


class TokenAuthentication(authentication.TokenAuthentication):
    """DRF token authentication using the ``Token`` keyword.

    JWT bearer tokens issued at login are accepted as well through
    ``rest_framework_simplejwt.authentication.JWTAuthentication``.
    """

    keyword = 'Token'
