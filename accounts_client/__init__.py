"""
Accounts client - Two-layer architecture for the accounts API.

Layers:
- core: Raw types and HTTP client
- sdk: High-level AccountsClient with typed operations
"""

import logging

from accounts_client.sdk import AccountsClient

# No output unless the application configures logging
logging.getLogger("accounts_client").addHandler(logging.NullHandler())

__version__ = "0.1.0"
__all__ = ["AccountsClient"]
