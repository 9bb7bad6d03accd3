"""Principal identity models."""

from scopeauthz.auth.models import Principal

__all__ = ["Principal"]
