# -*- coding: utf-8 -*-
"""
RU: Криптографические утилиты: RNG через HKDF‑микширование, проверки энтропии,
best‑effort зануление буферов, сравнение в константное время и получение
случайных байт из внедряемого источника.
"""
from __future__ import annotations

import hmac
import logging
import math
import os
import secrets
from collections import Counter
from typing import Callable, Final, Optional, Union

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from src.security.aead.core.exceptions import RandomSourceError

_LOGGER: Final = logging.getLogger(__name__)

_MAX_RANDOM_BYTES: Final[int] = 10 * 1024 * 1024
_ENTROPY_SAMPLE_THRESHOLD: Final[int] = 256
_MIN_SHANNON_PER_BYTE: Final[float] = 7.20
_SMALL_APT_MIN_N: Final[int] = 32

RandomSource = Callable[[int], bytes]
"""Источник случайных байт: принимает длину, возвращает ровно столько байт."""


def generate_random_bytes(n: int) -> bytes:
    """
    Generate cryptographically secure random bytes with entropy checks.

    Uses dual-source XOR (os.urandom + secrets.token_bytes) mixed via HKDF-SHA256
    for defense-in-depth against RNG failures.

    Args:
        n: number of bytes to generate (1..10MiB).

    Returns:
        Random bytes of requested length.

    Raises:
        ValueError: if n is out of range or entropy checks fail.
    """
    if not isinstance(n, int) or n <= 0 or n > _MAX_RANDOM_BYTES:
        raise ValueError("Requested random size must be in 1..10MiB")

    src1 = os.urandom(n)
    src2 = secrets.token_bytes(n)
    ikm = bytes(a ^ b for a, b in zip(src1, src2))
    salt = src2[:16] if len(src2) >= 16 else src2
    hkdf = HKDF(
        algorithm=hashes.SHA256(), length=n, salt=salt, info=b"AEAD-GCMSIV-UTILS-RNG-v1"
    )
    out = hkdf.derive(ikm)

    _rct_apt_checks(out)
    if n >= _ENTROPY_SAMPLE_THRESHOLD:
        h = _shannon_entropy(out)
        if h < _MIN_SHANNON_PER_BYTE:
            _LOGGER.warning(
                "Entropy check low (%.2f bits/byte) on %d-byte sample; continuing", h, n
            )

    _LOGGER.debug("Generated %d random bytes", n)
    return out


def _rct_apt_checks(data: bytes) -> None:
    """
    Repetition Count Test (RCT) and Adaptive Proportion Test (APT) sanity checks.

    Raises:
        ValueError: if data fails basic entropy sanity checks.
    """
    if not data:
        raise ValueError("Empty data for entropy checks")
    if len(data) > 1 and all(b == data[0] for b in data):
        raise ValueError("Degenerate RNG output (all bytes equal)")
    if len(data) >= _SMALL_APT_MIN_N:
        freq: Counter[int] = Counter(data)
        max_prop = max(freq.values()) / float(len(data))
        if max_prop > 0.80:
            raise ValueError("RNG output fails adaptive proportion sanity check")


def _shannon_entropy(data: bytes) -> float:
    """Shannon entropy in bits per byte (0.0 to 8.0)."""
    if not data:
        return 0.0
    freq: Counter[int] = Counter(data)
    n = len(data)
    ent: float = 0.0
    for c in freq.values():
        p = c / n
        ent -= p * math.log2(p)
    return ent


def draw_random(source: Optional[RandomSource], n: int) -> bytes:
    """
    Получить n случайных байт из источника.

    Args:
        source: внедрённый источник; None означает generate_random_bytes.
        n: требуемое количество байт.

    Returns:
        Ровно n байт.

    Raises:
        RandomSourceError: источник упал или вернул не n байт.
    """
    if source is None:
        source = generate_random_bytes
    try:
        out = source(n)
    except (ValueError, OSError, NotImplementedError) as e:
        _LOGGER.error("Random source failure: %s", e.__class__.__name__)
        raise RandomSourceError(n, e.__class__.__name__) from e
    if not isinstance(out, (bytes, bytearray)) or len(out) != n:
        raise RandomSourceError(n, "short or malformed output")
    return bytes(out)


def zero_memory(buf: Optional[bytearray]) -> None:
    """
    Best-effort zeroization of mutable buffer.

    Args:
        buf: bytearray to wipe (None is silently ignored).

    Notes:
        - Only works on bytearray (mutable); bytes cannot be wiped.
        - Ограничения Python: сборщик мусора, копии внутри OpenSSL и swap
        означают, что истинное криптографическое стирание недостижимо
        на чистом Python.
    """
    if buf is None:
        return
    try:
        for i in range(len(buf)):
            buf[i] = 0
    except (TypeError, AttributeError) as e:
        _LOGGER.debug("zero_memory skip (immutable): %s", e.__class__.__name__)


def secure_compare(a: Union[bytes, bytearray], b: Union[bytes, bytearray]) -> bool:
    """
    Constant-time bytes comparison.

    Returns:
        True if sequences are equal, False otherwise.
    """
    return hmac.compare_digest(bytes(a), bytes(b))


__all__ = [
    "RandomSource",
    "generate_random_bytes",
    "draw_random",
    "zero_memory",
    "secure_compare",
]
