"""
iorgate configuration.

Environment-driven settings and request payload schemas.
"""

from .schemas import AliasPayload, AppSettings, ComponentPayload, UpdatePayload

__all__ = [
    "AliasPayload",
    "AppSettings",
    "ComponentPayload",
    "UpdatePayload",
]
