"""
cryptec - bind a secret to symmetric encrypt/decrypt operations.

Handles:
- Secret-bound encrypt/decrypt (str <-> hex, bytes <-> bytes)
- Future and callback based deferred variants on asyncio
- Legacy password-derived cipher contexts (EVP_BytesToKey)
"""

from .binder import Cryptec
from .cipher import CipherContext, create_cipher, create_decipher, get_ciphers
from .config import VERSION, config, configure_logging

__version__ = VERSION

__all__ = [
    "Cryptec",
    "CipherContext",
    "create_cipher",
    "create_decipher",
    "get_ciphers",
    "config",
    "configure_logging",
]
