"""Mini README: Three-party revenue sharing ledger.

A single company funds a pool that is split by fixed percentages between a
platform and a creator, each of whom withdraws their accumulated credit
independently. The ledger itself lives in ``revshare.ledger``; the HTTP
interface, deployment helpers and CLI are thin callers around it.
"""

from .logging_utils import get_logger

__version__ = "0.1.0"

__all__ = ["get_logger", "__version__"]
