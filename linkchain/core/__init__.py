"""linkchain.core

Core primitives: blocks, hashing, validation, the ledger.

Nothing in here knows about sockets. If a module needs to exist, it should
probably depend only on this package.
"""

from .config import Config
from .exceptions import LinkchainError
from .hashing import compute_hash
from .ledger import Ledger
from .models import Block
from .validation import is_valid_chain, is_valid_successor

__all__ = [
    "Block",
    "Config",
    "Ledger",
    "LinkchainError",
    "compute_hash",
    "is_valid_chain",
    "is_valid_successor",
]
