"""
Secret-bound encrypt/decrypt helpers.

A Cryptec instance binds its operations in the constructor so that:
- encrypt and decrypt can be passed around as plain callables
  (e.g. ``list(map(cryptec.encrypt, values))``)
- the instance can sit inside other objects, be logged or repr()'d,
  without leaking the secret, since the secret is never stored on it.
"""

import asyncio
import logging
from typing import Any, Callable, Optional

from .cipher import create_cipher, create_decipher
from .config import config

logger = logging.getLogger(__name__)

Callback = Callable[[Optional[BaseException], Any], None]

_BYTES_TYPES = (bytes, bytearray, memoryview)


def _defer(operation: Callable[[], Any], callback: Optional[Callback],
           loop: Optional[asyncio.AbstractEventLoop]) -> Optional[asyncio.Future]:
    """
    Run `operation` on the next turn of the event loop.

    Without a callback a future is returned and receives the result or the
    raised exception. With a callback, None is returned and the callback is
    called exactly once as callback(None, result) or callback(error, None).
    """
    if loop is None:
        loop = asyncio.get_running_loop()

    if callback is None:
        future = loop.create_future()

        def run_to_future():
            try:
                result = operation()
            except Exception as e:
                logger.debug(f"Deferred operation failed: {type(e).__name__}")
                if not future.cancelled():
                    future.set_exception(e)
            else:
                if not future.cancelled():
                    future.set_result(result)

        loop.call_soon(run_to_future)
        return future

    def run_to_callback():
        try:
            result = operation()
        except Exception as e:
            logger.debug(f"Deferred operation failed: {type(e).__name__}")
            callback(e, None)
        else:
            callback(None, result)

    loop.call_soon(run_to_callback)
    return None


class Cryptec:
    """Binds a secret and an algorithm to encrypt/decrypt operations."""

    def __init__(self, secret, algorithm: Optional[str] = None):
        """
        Initialize the binder.

        Nothing is validated here: an unknown algorithm or an unusable
        secret only fails once an operation is called.

        Args:
            secret: str or bytes-like secret. Key and IV are derived from it
            algorithm: Cipher name, defaults to config.DEFAULT_ALGORITHM
        """
        if algorithm is None:
            algorithm = config.DEFAULT_ALGORITHM
        self.algorithm = algorithm

        def encrypt(obj):
            """
            Encrypt a str or bytes-like value.

            Returns a hex str for str input, bytes for bytes-like input.
            """
            cipher = create_cipher(algorithm, secret)
            if isinstance(obj, _BYTES_TYPES):
                return cipher.update(obj) + cipher.final()
            return cipher.update(obj, "utf8", "hex") + cipher.final("hex")

        def decrypt(encrypted, as_bytes: bool = False):
            """
            Decrypt a value produced by encrypt.

            The original type cannot be inferred from the ciphertext, so a
            str is returned unless `as_bytes` is true.
            """
            decipher = create_decipher(algorithm, secret)
            if as_bytes:
                return decipher.update(encrypted) + decipher.final()
            return decipher.update(encrypted, "hex", "utf8") + decipher.final("utf8")

        def encrypt_async(obj, callback: Optional[Callback] = None, *,
                          loop: Optional[asyncio.AbstractEventLoop] = None):
            """Run encrypt on the next loop turn, returning a future unless a callback is given."""
            return _defer(lambda: encrypt(obj), callback, loop)

        def decrypt_async(encrypted, as_bytes: bool = False, callback: Optional[Callback] = None, *,
                          loop: Optional[asyncio.AbstractEventLoop] = None):
            """Run decrypt on the next loop turn, returning a future unless a callback is given."""
            return _defer(lambda: decrypt(encrypted, as_bytes), callback, loop)

        self.encrypt = encrypt
        self.decrypt = decrypt
        self.encrypt_async = encrypt_async
        self.decrypt_async = decrypt_async

    def __repr__(self) -> str:
        return f"Cryptec(algorithm={self.algorithm!r})"
