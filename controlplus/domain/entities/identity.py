"""Authenticated identity as reported by the authentication provider."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AuthIdentity:
    """Verified identity behind an ID token. Carries no tenant information."""

    uid: str
    email: str = ""
    display_name: str = ""
    photo_url: str = ""
