"""
Persistence bridge: HTTP-agnostic component lifecycle operations.
"""

from .persistence import DELETE_ACK, PersistenceBridge

__all__ = ["DELETE_ACK", "PersistenceBridge"]
