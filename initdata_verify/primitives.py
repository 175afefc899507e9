import hashlib
import hmac
from dataclasses import dataclass
from typing import Callable
from urllib.parse import unquote_plus


def _hmac_sha256(key: bytes, message: bytes) -> bytes:
    return hmac.new(key, message, hashlib.sha256).digest()


def _percent_decode(text: str) -> str:
    """Query-string decoding: '+' is a space, %XX sequences are UTF-8."""
    return unquote_plus(text, encoding="utf-8", errors="replace")


@dataclass(frozen=True)
class Primitives:
    """The crypto and encoding operations the pipeline depends on.

    Swap these out in tests to observe or stub the pipeline without
    touching its logic.
    """
    hmac_sha256: Callable[[bytes, bytes], bytes] = _hmac_sha256
    percent_decode: Callable[[str], str] = _percent_decode


DEFAULT_PRIMITIVES = Primitives()
