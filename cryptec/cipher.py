"""
Legacy password-based cipher contexts.

Mirrors the classic OpenSSL "create cipher from algorithm + password" API:
the key and IV are both derived from the secret with EVP_BytesToKey
(MD5, no salt, one iteration), so the same secret always produces the
same ciphertext for the same input. The primitives come from `cryptography`.
"""

import codecs
import logging
from dataclasses import dataclass
from typing import Optional, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

logger = logging.getLogger(__name__)

BytesLike = Union[bytes, bytearray, memoryview]

BLOCK_SIZE = algorithms.AES.block_size  # bits


@dataclass(frozen=True)
class CipherSpec:
    """Describes one supported algorithm name."""
    name: str
    key_len: int
    iv_len: int
    mode: type
    padded: bool


def _build_registry() -> dict[str, CipherSpec]:
    registry = {}
    for bits in (128, 192, 256):
        for mode_name, mode, iv_len, padded in (
            ("cbc", modes.CBC, 16, True),
            ("ctr", modes.CTR, 16, False),
            ("ecb", modes.ECB, 0, True),
        ):
            name = f"aes-{bits}-{mode_name}"
            registry[name] = CipherSpec(name, bits // 8, iv_len, mode, padded)
        # OpenSSL short aliases resolve to CBC
        registry[f"aes{bits}"] = registry[f"aes-{bits}-cbc"]
    return registry


_CIPHERS = _build_registry()


def get_ciphers() -> list[str]:
    """Return the sorted list of supported algorithm names, aliases included."""
    return sorted(_CIPHERS)


def get_cipher_spec(algorithm: str) -> CipherSpec:
    """
    Look up an algorithm by name (case-insensitive).

    Raises:
        UnsupportedAlgorithm: If the name is not a known cipher
    """
    spec = _CIPHERS.get(str(algorithm).lower())
    if spec is None:
        raise UnsupportedAlgorithm(f"Unknown cipher: {algorithm}")
    return spec


def _to_bytes(value) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise TypeError(f"Expected str or bytes-like value, got {type(value).__name__}")


def derive_key_and_iv(secret: Union[str, BytesLike], key_len: int, iv_len: int) -> tuple[bytes, bytes]:
    """
    Derive key and IV from a secret with OpenSSL's EVP_BytesToKey.

    Uses MD5, no salt and a single iteration:
    D_1 = MD5(secret), D_i = MD5(D_{i-1} || secret), concatenated until
    key_len + iv_len bytes are available.

    Args:
        secret: The shared secret (str is UTF-8 encoded)
        key_len: Key length in bytes
        iv_len: IV length in bytes (0 for modes without an IV)

    Returns:
        Tuple of (key, iv)
    """
    data = _to_bytes(secret)
    derived = b""
    block = b""
    while len(derived) < key_len + iv_len:
        digest = hashes.Hash(hashes.MD5())
        digest.update(block + data)
        block = digest.finalize()
        derived += block
    return derived[:key_len], derived[key_len:key_len + iv_len]


def _normalize_encoding(encoding: Optional[str]) -> Optional[str]:
    if encoding is None:
        return None
    normalized = encoding.lower()
    if normalized in ("utf8", "utf-8"):
        return "utf8"
    if normalized == "hex":
        return "hex"
    raise ValueError(f"Unknown encoding: {encoding}")


class CipherContext:
    """A single-use encryption or decryption stream (update ... final)."""

    def __init__(self, spec: CipherSpec, key: bytes, iv: bytes, encrypting: bool):
        mode = spec.mode(iv) if spec.iv_len else spec.mode()
        cipher = Cipher(algorithms.AES(key), mode)
        self.algorithm = spec.name
        self._encrypting = encrypting
        self._ctx = cipher.encryptor() if encrypting else cipher.decryptor()
        self._padding = None
        if spec.padded:
            pkcs7 = padding.PKCS7(BLOCK_SIZE)
            self._padding = pkcs7.padder() if encrypting else pkcs7.unpadder()
        self._decoder = None

    def update(self, data, input_encoding: Optional[str] = None, output_encoding: Optional[str] = None):
        """
        Feed data through the cipher.

        Args:
            data: str or bytes-like input. Strings are decoded with
                `input_encoding` ("utf8" or "hex", default "utf8");
                bytes-like input is used as-is.
            input_encoding: Encoding of a str `data`
            output_encoding: None for bytes, "hex" or "utf8" for str

        Returns:
            The transformed chunk, as bytes or str
        """
        output_encoding = _normalize_encoding(output_encoding)
        if isinstance(data, str):
            if _normalize_encoding(input_encoding) == "hex":
                raw = bytes.fromhex(data)
            else:
                raw = data.encode("utf-8")
        else:
            raw = _to_bytes(data)

        if self._padding is None:
            chunk = self._ctx.update(raw)
        elif self._encrypting:
            chunk = self._ctx.update(self._padding.update(raw))
        else:
            chunk = self._padding.update(self._ctx.update(raw))
        return self._encode(chunk, output_encoding, final=False)

    def final(self, output_encoding: Optional[str] = None):
        """Flush the remaining output; the context cannot be used afterwards."""
        output_encoding = _normalize_encoding(output_encoding)
        if self._padding is None:
            chunk = self._ctx.finalize()
        elif self._encrypting:
            chunk = self._ctx.update(self._padding.finalize()) + self._ctx.finalize()
        else:
            tail = self._ctx.finalize()
            chunk = self._padding.update(tail) + self._padding.finalize()
        return self._encode(chunk, output_encoding, final=True)

    def _encode(self, chunk: bytes, encoding: Optional[str], final: bool):
        if encoding is None:
            return chunk
        if encoding == "hex":
            return chunk.hex()
        # Multi-byte characters may straddle update/final boundaries
        if self._decoder is None:
            self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        return self._decoder.decode(chunk, final=final)


def _create(algorithm: str, secret, encrypting: bool) -> CipherContext:
    spec = get_cipher_spec(algorithm)
    key, iv = derive_key_and_iv(secret, spec.key_len, spec.iv_len)
    logger.debug(f"Created {'cipher' if encrypting else 'decipher'} context for {spec.name}")
    return CipherContext(spec, key, iv, encrypting)


def create_cipher(algorithm: str, secret: Union[str, BytesLike]) -> CipherContext:
    """
    Create an encryption context keyed from `secret`.

    Raises:
        UnsupportedAlgorithm: If `algorithm` is unknown
    """
    return _create(algorithm, secret, encrypting=True)


def create_decipher(algorithm: str, secret: Union[str, BytesLike]) -> CipherContext:
    """
    Create a decryption context keyed from `secret`.

    Raises:
        UnsupportedAlgorithm: If `algorithm` is unknown
    """
    return _create(algorithm, secret, encrypting=False)
