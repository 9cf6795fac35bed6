"""
Adapters package - External service connections.
Device-local storage and the identity provider seam.
"""

from adapters import local_adapter, identity_adapter

__all__ = [
    "local_adapter",
    "identity_adapter",
]
