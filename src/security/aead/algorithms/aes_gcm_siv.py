"""
AES-GCM-SIV - nonce-misuse resistant AEAD (RFC 8452).

Реализация построена на блочном шифре AES из библиотеки cryptography
(режим ECB используется только как вызов блочной функции):

    1. Для каждого nonce из мастер-ключа выводятся ключ аутентификации
       (16 байт) и ключ шифрования записи (16 или 32 байта).
    2. POLYVAL над GF(2^128) сжимает AAD и plaintext (каждый дополнен
       нулями до 16 байт) и блок длин в битах.
    3. Синтетический IV: (POLYVAL xor nonce), старший бит последнего
       байта сброшен, зашифрован ключом записи. Это и есть тег.
    4. Plaintext шифруется в режиме CTR, начальный счётчик - тег
       с установленным старшим битом последнего байта; первые 32 бита
       блока - счётчик little-endian по модулю 2^32.

Формат шифртекста: nonce (12) || ciphertext (len(plaintext)) || tag (16).
Совместим побайтно с `AESGCMSIV` из cryptography с префиксом nonce.

Security Properties:
    - Key: 128 или 256 бит
    - Nonce: 96 бит, генерируется внутри из источника случайности
    - Tag: 128 бит
    - Nonce reuse: раскрывает только равенство сообщений

Example:
    >>> cipher = AesGcmSivCipher(os.urandom(32))
    >>> ct = cipher.encrypt(b"Misuse-resistant data", b"header")
    >>> cipher.decrypt(ct, b"header")
    b'Misuse-resistant data'

References:
    - RFC 8452: https://tools.ietf.org/html/rfc8452
"""

from __future__ import annotations

import logging
import struct
from typing import List, Optional, Tuple, Union

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from src.security.aead.config import NONCE_SIZE, SUPPORTED_KEY_SIZES, TAG_SIZE
from src.security.aead.core.exceptions import (
    AuthenticationFailedError,
    InvalidArgumentError,
    InvalidKeySizeError,
    PlaintextTooLargeError,
)
from src.security.aead.utils import RandomSource, draw_random, secure_compare, zero_memory

logger = logging.getLogger(__name__)

__all__ = [
    "AesGcmSivCipher",
    "polyval",
]

_BLOCK_SIZE = 16

# x^128 + x^127 + x^126 + x^121 + 1
_POLYVAL_MODULUS = (1 << 128) | (1 << 127) | (1 << 126) | (1 << 121) | 1

_MAX_INPUT_SIZE = 1 << 36

BytesLike = Union[bytes, bytearray]


# ==============================================================================
# POLYVAL
# ==============================================================================


class _Polyval:
    """
    POLYVAL с фиксированным ключом H.

    Элементы поля - little-endian целые: бит i соответствует x^i.
    dot(a, H) = a * H * x^-128; множитель x^-128 вносится в H один раз,
    затем строится таблица H' * x^k (k = 0..127), и умножение сводится
    к XOR строк таблицы по установленным битам a.
    """

    def __init__(self, h: BytesLike) -> None:
        value = int.from_bytes(h, "little")
        for _ in range(128):
            if value & 1:
                value ^= _POLYVAL_MODULUS
            value >>= 1

        table: List[int] = []
        for _ in range(128):
            table.append(value)
            value <<= 1
            if value >> 128:
                value ^= _POLYVAL_MODULUS
        self._table = table

    def _mul(self, a: int) -> int:
        result = 0
        k = 0
        while a:
            if a & 1:
                result ^= self._table[k]
            a >>= 1
            k += 1
        return result

    def digest(self, data: BytesLike) -> bytes:
        if len(data) % _BLOCK_SIZE:
            raise ValueError("POLYVAL input must be a multiple of 16 bytes")
        s = 0
        for offset in range(0, len(data), _BLOCK_SIZE):
            block = int.from_bytes(data[offset : offset + _BLOCK_SIZE], "little")
            s = self._mul(s ^ block)
        return s.to_bytes(_BLOCK_SIZE, "little")

    def clear(self) -> None:
        self._table = []


def polyval(h: BytesLike, data: BytesLike) -> bytes:
    """
    POLYVAL(H, X_1, ..., X_s) из RFC 8452, раздел 3.

    Args:
        h: 16-байтный ключ хеширования
        data: вход, кратный 16 байтам

    Returns:
        16-байтное значение POLYVAL
    """
    if len(h) != _BLOCK_SIZE:
        raise ValueError("POLYVAL key must be 16 bytes")
    return _Polyval(h).digest(data)


def _pad16(data: BytesLike) -> bytes:
    remainder = len(data) % _BLOCK_SIZE
    if remainder == 0:
        return bytes(data)
    return bytes(data) + b"\x00" * (_BLOCK_SIZE - remainder)


def _aes_ecb(cipher: Cipher, data: bytes) -> bytes:
    encryptor = cipher.encryptor()
    return encryptor.update(data) + encryptor.finalize()


def _require_bytes(name: str, value: object) -> None:
    if not isinstance(value, (bytes, bytearray)):
        raise TypeError(f"{name} must be bytes, got {type(value).__name__}")


# ==============================================================================
# CIPHER
# ==============================================================================


class AesGcmSivCipher:
    """
    AEAD-примитив AES-GCM-SIV.

    Экземпляр неизменяем после создания и может использоваться
    из нескольких потоков одновременно. Ключ хранится в bytearray
    и затирается в close() (или при выходе из with / сборке мусора).

    Ограничения:
        algorithms.AES хранит собственную неизменяемую копию ключа (bytes)
        до сборки мусора объекта Cipher; close() отпускает ссылку на него,
        но затереть эту копию на чистом Python невозможно (см. zero_memory).

    Attributes:
        NONCE_SIZE: 12
        TAG_SIZE: 16
        KEY_SIZES: допустимые размеры ключа (16, 32)

    Example:
        >>> with AesGcmSivCipher(key) as cipher:
        ...     ct = cipher.encrypt(b"data", b"aad")
    """

    NONCE_SIZE = NONCE_SIZE
    TAG_SIZE = TAG_SIZE
    KEY_SIZES = SUPPORTED_KEY_SIZES
    is_aead = True

    def __init__(
        self,
        key: BytesLike,
        *,
        random_source: Optional[RandomSource] = None,
    ) -> None:
        """
        Args:
            key: 16 или 32 байта ключа
            random_source: источник случайных nonce (по умолчанию
                generate_random_bytes)

        Raises:
            TypeError: key не bytes
            InvalidKeySizeError: неверная длина ключа
        """
        self._key: Optional[bytearray] = None
        _require_bytes("Key", key)
        if len(key) not in self.KEY_SIZES:
            raise InvalidKeySizeError(len(key), self.KEY_SIZES, algorithm="AES-GCM-SIV")

        self._key = bytearray(key)
        self._key_size = len(key)
        self._random_source = random_source
        self._master: Optional[Cipher] = Cipher(algorithms.AES(bytes(self._key)), modes.ECB())

        logger.debug(f"Created {self.algorithm_name} cipher")

    # --- properties ------------------------------------------------------

    @property
    def algorithm_name(self) -> str:
        return f"AES-{self._key_size * 8}-GCM-SIV"

    @property
    def key_size(self) -> int:
        return self._key_size

    @property
    def nonce_size(self) -> int:
        return self.NONCE_SIZE

    @property
    def closed(self) -> bool:
        return self._master is None

    # --- public API ------------------------------------------------------

    def encrypt(self, plaintext: BytesLike, associated_data: Optional[BytesLike] = b"") -> bytes:
        """
        Зашифровать plaintext со случайным nonce.

        Returns:
            nonce (12) || ciphertext || tag (16)

        Raises:
            PlaintextTooLargeError: plaintext или AAD длиннее 2^36 байт
            RandomSourceError: источник случайности не выдал nonce
        """
        associated_data = self._check_inputs(plaintext, associated_data)
        nonce = draw_random(self._random_source, self.NONCE_SIZE)
        return nonce + self._seal(nonce, plaintext, associated_data)

    def encrypt_with_nonce(
        self,
        nonce: BytesLike,
        plaintext: BytesLike,
        associated_data: Optional[BytesLike] = b"",
    ) -> bytes:
        """
        Детерминированное шифрование с заданным nonce.

        Повтор nonce для разных сообщений раскрывает только факт
        равенства сообщений.

        Raises:
            InvalidArgumentError: nonce не 12 байт
        """
        _require_bytes("Nonce", nonce)
        if len(nonce) != self.NONCE_SIZE:
            raise InvalidArgumentError(
                f"nonce must be {self.NONCE_SIZE} bytes, got {len(nonce)} bytes",
                algorithm=self.algorithm_name,
            )
        associated_data = self._check_inputs(plaintext, associated_data)
        return bytes(nonce) + self._seal(bytes(nonce), plaintext, associated_data)

    def decrypt(self, ciphertext: BytesLike, associated_data: Optional[BytesLike] = b"") -> bytes:
        """
        Расшифровать и проверить шифртекст.

        Raises:
            AuthenticationFailedError: любой отказ проверки (короткий вход,
                изменённые байты, другой AAD)
        """
        self._check_open()
        _require_bytes("Ciphertext", ciphertext)
        if associated_data is None:
            associated_data = b""
        _require_bytes("Associated data", associated_data)

        overhead = self.NONCE_SIZE + self.TAG_SIZE
        if len(ciphertext) < overhead or len(ciphertext) - overhead > _MAX_INPUT_SIZE:
            logger.debug("Decryption rejected: ciphertext length out of range")
            raise AuthenticationFailedError(algorithm=self.algorithm_name)
        if len(associated_data) > _MAX_INPUT_SIZE:
            raise AuthenticationFailedError(algorithm=self.algorithm_name)

        data = bytes(ciphertext)
        nonce = data[: self.NONCE_SIZE]
        body = data[self.NONCE_SIZE : -self.TAG_SIZE]
        tag = data[-self.TAG_SIZE :]

        auth_key, enc_key = self._derive_keys(nonce)
        try:
            record_cipher = Cipher(algorithms.AES(bytes(enc_key)), modes.ECB())
            plaintext = bytearray(self._ctr(record_cipher, tag, body))
            expected = self._compute_tag(auth_key, record_cipher, nonce, associated_data, plaintext)
        finally:
            zero_memory(auth_key)
            zero_memory(enc_key)

        if not secure_compare(expected, tag):
            zero_memory(plaintext)
            logger.debug("Decryption rejected: tag mismatch")
            raise AuthenticationFailedError(algorithm=self.algorithm_name)

        return bytes(plaintext)

    def close(self) -> None:
        """Затереть ключ. Повторный вызов безопасен."""
        if self._key is not None:
            zero_memory(self._key)
        self._master = None

    def __enter__(self) -> "AesGcmSivCipher":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __del__(self) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"{self.__class__.__name__}(algorithm={self.algorithm_name!r}, {state})"

    # --- internals -------------------------------------------------------

    def _check_open(self) -> Cipher:
        master = self._master
        if master is None:
            raise RuntimeError(f"{self.__class__.__name__} has been closed")
        return master

    def _check_inputs(
        self, plaintext: BytesLike, associated_data: Optional[BytesLike]
    ) -> bytes:
        self._check_open()
        _require_bytes("Plaintext", plaintext)
        if associated_data is None:
            associated_data = b""
        _require_bytes("Associated data", associated_data)
        if len(plaintext) > _MAX_INPUT_SIZE:
            raise PlaintextTooLargeError(
                "plaintext", len(plaintext), _MAX_INPUT_SIZE, algorithm=self.algorithm_name
            )
        if len(associated_data) > _MAX_INPUT_SIZE:
            raise PlaintextTooLargeError(
                "associated data", len(associated_data), _MAX_INPUT_SIZE,
                algorithm=self.algorithm_name,
            )
        return bytes(associated_data)

    def _derive_keys(self, nonce: bytes) -> Tuple[bytearray, bytearray]:
        """Ключ аутентификации и ключ шифрования записи для данного nonce."""
        master = self._check_open()
        n_blocks = 4 if self._key_size == 16 else 6
        counters = b"".join(struct.pack("<I", i) + nonce for i in range(n_blocks))
        blocks = _aes_ecb(master, counters)

        derived = bytearray()
        for i in range(n_blocks):
            derived += blocks[i * _BLOCK_SIZE : i * _BLOCK_SIZE + 8]
        auth_key = derived[:16]
        enc_key = derived[16:]
        zero_memory(derived)
        return auth_key, enc_key

    def _compute_tag(
        self,
        auth_key: bytearray,
        record_cipher: Cipher,
        nonce: bytes,
        associated_data: bytes,
        plaintext: BytesLike,
    ) -> bytes:
        length_block = struct.pack("<QQ", len(associated_data) * 8, len(plaintext) * 8)
        hasher = _Polyval(auth_key)
        try:
            s = bytearray(
                hasher.digest(_pad16(associated_data) + _pad16(plaintext) + length_block)
            )
        finally:
            hasher.clear()
        for i in range(self.NONCE_SIZE):
            s[i] ^= nonce[i]
        s[15] &= 0x7F
        return _aes_ecb(record_cipher, bytes(s))

    @staticmethod
    def _ctr(record_cipher: Cipher, tag: bytes, data: BytesLike) -> bytes:
        if not data:
            return b""
        block = bytearray(tag)
        block[15] |= 0x80
        counter = int.from_bytes(block[:4], "little")
        tail = bytes(block[4:])

        n_blocks = (len(data) + _BLOCK_SIZE - 1) // _BLOCK_SIZE
        counter_blocks = b"".join(
            ((counter + i) & 0xFFFFFFFF).to_bytes(4, "little") + tail for i in range(n_blocks)
        )
        keystream = _aes_ecb(record_cipher, counter_blocks)[: len(data)]
        mixed = int.from_bytes(data, "big") ^ int.from_bytes(keystream, "big")
        return mixed.to_bytes(len(data), "big")

    def _seal(self, nonce: bytes, plaintext: BytesLike, associated_data: bytes) -> bytes:
        auth_key, enc_key = self._derive_keys(nonce)
        try:
            record_cipher = Cipher(algorithms.AES(bytes(enc_key)), modes.ECB())
            tag = self._compute_tag(auth_key, record_cipher, nonce, associated_data, plaintext)
            body = self._ctr(record_cipher, tag, plaintext)
        finally:
            zero_memory(auth_key)
            zero_memory(enc_key)
        return body + tag
