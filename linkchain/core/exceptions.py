"""linkchain.core.exceptions

Errors are part of the interface.

Structural rejection of a block or chain is not an error: validators answer
``False``. Exceptions are reserved for things a caller has to act on.
"""

from __future__ import annotations


class LinkchainError(Exception):
    """Base exception for linkchain."""


class ConfigError(LinkchainError):
    """Configuration is missing, invalid, or inconsistent."""


class ProtocolError(LinkchainError):
    """A peer sent a frame that cannot be decoded into a protocol message."""


class PeerError(LinkchainError):
    """A peer link could not be opened or written to."""
