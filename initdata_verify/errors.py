"""Failure kinds raised while verifying initData.

Each subclass carries a stable ``kind`` string so callers (and the HTTP
layer) can tell failures apart without matching on messages. Messages
never include the bot token, the derived key or the computed signature.
"""


class InitDataError(Exception):
    kind = "init_data_error"


class InvalidInput(InitDataError):
    kind = "invalid_input"


class InvalidSecret(InitDataError):
    kind = "invalid_secret"


class MissingSignature(InitDataError):
    kind = "missing_signature"


class HashMismatch(InitDataError):
    kind = "hash_mismatch"


class MalformedField(InitDataError):
    kind = "malformed_field"

    def __init__(self, field: str, reason: str = ""):
        self.field = field
        msg = f"Invalid initData: field '{field}' could not be decoded"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class MissingTimestamp(InitDataError):
    kind = "missing_timestamp"


class Expired(InitDataError):
    kind = "expired"

    def __init__(self, auth_date: int, now: int, expires_in: int):
        self.auth_date = auth_date
        self.now = now
        self.expires_in = expires_in
        super().__init__(
            f"Data expired: auth_date {auth_date} is {now - auth_date}s old, "
            f"limit is {expires_in}s"
        )
