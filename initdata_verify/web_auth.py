"""Telegram Mini App initData HMAC-SHA256 validation.

Validates the initData string sent by the Telegram WebApp SDK to ensure
the request is authentic and, optionally, fresh. Pure functions, no I/O.

Reference: https://core.telegram.org/bots/webapps#validating-data-received-via-the-mini-app
"""

import hmac
import time
from dataclasses import dataclass

from .errors import (
    Expired, HashMismatch, InitDataError, InvalidInput, InvalidSecret,
    MissingSignature, MissingTimestamp,
)
from .init_data import InitData, decode_fields
from .primitives import DEFAULT_PRIMITIVES, Primitives


WEBAPP_KEY_LABEL = b"WebAppData"


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    data: InitData | None = None        # set only if ok is True
    error: InitDataError | None = None  # set only if ok is False

    @property
    def kind(self) -> str:
        return self.error.kind if self.error else ""


def validate_init_data(
    init_data: str,
    bot_token: str,
    expires_in: int | None = None,
    *,
    now: int | None = None,
    primitives: Primitives = DEFAULT_PRIMITIVES,
) -> ValidationResult:
    """Validate Telegram initData and return a tagged result.

    Returns ValidationResult(ok=True, data=...) on success, or
    ValidationResult(ok=False, error=...) where error.kind names the failure.
    """
    try:
        data = verify_init_data(
            init_data, bot_token, expires_in, now=now, primitives=primitives,
        )
    except InitDataError as e:
        return ValidationResult(ok=False, error=e)
    return ValidationResult(ok=True, data=data)


def verify_init_data(
    init_data: str,
    bot_token: str,
    expires_in: int | None = None,
    *,
    now: int | None = None,
    primitives: Primitives = DEFAULT_PRIMITIVES,
) -> InitData:
    """Like validate_init_data, but raises InitDataError on failure."""
    _check_payload(init_data)
    _check_secret(bot_token)

    fields, received_hash = parse_init_data(init_data, primitives)
    data_check_string = build_data_check_string(fields)
    expected_hash = compute_signature(bot_token, data_check_string, primitives)
    verify_signature(expected_hash, received_hash)

    data = decode_fields(fields, received_hash)
    if expires_in is not None:
        check_expiry(data, expires_in, now=now)
    return data


def _check_payload(init_data) -> None:
    if not isinstance(init_data, str) or not init_data:
        raise InvalidInput("Invalid initData: must be a non-empty string")


def _check_secret(bot_token) -> None:
    if not isinstance(bot_token, str) or not bot_token:
        raise InvalidSecret("Invalid bot token: must be a non-empty string")


def parse_init_data(
    init_data: str, primitives: Primitives = DEFAULT_PRIMITIVES,
) -> tuple[dict[str, str], str]:
    """Parse the initData query string and split off the hash.

    Returns (fields, hash). Later duplicates overwrite earlier ones.
    """
    _check_payload(init_data)
    fields = {}
    for segment in init_data.split("&"):
        if not segment:
            continue
        name, _, value = segment.partition("=")
        fields[primitives.percent_decode(name)] = primitives.percent_decode(value)

    received_hash = fields.pop("hash", "")
    if not received_hash:
        raise MissingSignature('Invalid initData: "hash" parameter not found')
    return fields, received_hash


def build_data_check_string(params: dict[str, str]) -> str:
    """Build the sorted newline-separated data-check-string for HMAC."""
    return "\n".join(sorted(f"{k}={v}" for k, v in params.items()))


def compute_signature(
    bot_token: str, data_check_string: str,
    primitives: Primitives = DEFAULT_PRIMITIVES,
) -> str:
    """Compute HMAC-SHA256 using the bot token as the secret key.

    The secret key is HMAC-SHA256("WebAppData", bot_token).
    """
    _check_secret(bot_token)
    secret_key = primitives.hmac_sha256(WEBAPP_KEY_LABEL, _utf8(bot_token))
    return primitives.hmac_sha256(secret_key, _utf8(data_check_string)).hex()


def _utf8(text: str) -> bytes:
    """UTF-8 encode, writing lone surrogates as U+FFFD like a JS encoder."""
    try:
        return text.encode("utf-8")
    except UnicodeEncodeError:
        utf16 = text.encode("utf-16-le", "surrogatepass")
        return utf16.decode("utf-16-le", "replace").encode("utf-8")


def verify_signature(expected_hash: str, received_hash: str) -> None:
    if not hmac.compare_digest(_utf8(expected_hash), _utf8(received_hash)):
        raise HashMismatch("Calculated hash does not match received hash")


def check_expiry(data: InitData, expires_in: int, now: int | None = None) -> None:
    """Reject payloads whose auth_date is more than expires_in seconds old."""
    auth_date = data.get("auth_date")
    if not isinstance(auth_date, int) or isinstance(auth_date, bool):
        raise MissingTimestamp(
            'Invalid initData: "auth_date" is missing or not a number')
    if now is None:
        now = int(time.time())
    if now - auth_date > expires_in:
        raise Expired(auth_date, now, expires_in)
