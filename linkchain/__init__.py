"""linkchain: a hash-linked ledger replicated between peers.

Every node starts from the same block 0. Everything after that is negotiated:
the longest correctly linked chain wins, and nothing else is consulted.
"""

from __future__ import annotations

__all__ = [
    "__version__",
    "GENESIS_DATA",
    "GENESIS_HASH",
    "GENESIS_TIMESTAMP",
]

__version__ = "1.0.0"

# Well-known genesis pair. Nodes configured with different values can never sync.
GENESIS_DATA = "this-is-block-salt-!!!"
GENESIS_HASH = "816534932c2b7154836da6afc367695e6337db8a921823784c14378abed4f7d7"
GENESIS_TIMESTAMP = 1465154705  # Jun 5, 2016 19:25:05 UTC
