"""Typed view of a verified initData payload.

Field decoding is table-driven: FIELD_SCHEMA maps a field name to the
function that turns its raw string into a value. Fields not in the table
pass through as strings.
"""

import copy
import json
import re
from collections.abc import Mapping
from typing import Any, Callable, Iterator, Literal, TypedDict

from .errors import MalformedField


class _TelegramUserRequired(TypedDict):
    id: int
    first_name: str


class TelegramUser(_TelegramUserRequired, total=False):
    """Shape of the `user` and `receiver` fields."""
    last_name: str
    username: str
    language_code: str
    is_bot: bool
    is_premium: bool
    added_to_attachment_menu: bool
    allows_write_to_pm: bool
    photo_url: str


class _TelegramChatRequired(TypedDict):
    id: int
    type: Literal["group", "supergroup", "channel"]
    title: str


class TelegramChat(_TelegramChatRequired, total=False):
    """Shape of the `chat` field."""
    username: str
    photo_url: str


ChatType = Literal["sender", "private", "group", "supergroup", "channel"]


_INT_RE = re.compile(r"-?[0-9]+")
MAX_NESTING = 32


def _nesting_depth(value: Any) -> int:
    """Deepest dict/list nesting, walked without recursion."""
    deepest = 0
    stack = [(value, 1)]
    while stack:
        node, depth = stack.pop()
        if isinstance(node, dict):
            children = node.values()
        elif isinstance(node, list):
            children = node
        else:
            continue
        deepest = max(deepest, depth)
        stack.extend((child, depth + 1) for child in children)
    return deepest


def _decode_object(name: str, raw: str) -> dict:
    try:
        value = json.loads(raw)
    except (json.JSONDecodeError, RecursionError):
        raise MalformedField(name, "not valid JSON") from None
    if not isinstance(value, dict):
        raise MalformedField(name, "expected a JSON object")
    if _nesting_depth(value) > MAX_NESTING:
        raise MalformedField(name, "nested too deeply")
    return value


def _decode_int(name: str, raw: str) -> int:
    if not _INT_RE.fullmatch(raw):
        raise MalformedField(name, "expected an integer")
    return int(raw)


def _decode_str(name: str, raw: str) -> str:
    return raw


FIELD_SCHEMA: dict[str, Callable[[str, str], Any]] = {
    "user": _decode_object,
    "receiver": _decode_object,
    "chat": _decode_object,
    "auth_date": _decode_int,
}


class InitData(Mapping):
    """Read-only mapping of decoded initData fields.

    Only built by the pipeline after the signature has been verified.
    Structured values are handed out as copies, so the stored payload
    cannot change after construction.
    """

    __slots__ = ("_fields",)

    def __init__(self, fields: dict[str, Any]):
        object.__setattr__(self, "_fields", copy.deepcopy(dict(fields)))

    def __setattr__(self, name, value):
        raise AttributeError("InitData is read-only")

    def __delattr__(self, name):
        raise AttributeError("InitData is read-only")

    def __getitem__(self, key: str) -> Any:
        value = self._fields[key]
        if isinstance(value, (dict, list)):
            return copy.deepcopy(value)
        return value

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"InitData({self._fields!r})"

    @property
    def hash(self) -> str:
        return self["hash"]

    @property
    def auth_date(self) -> int | None:
        return self.get("auth_date")

    @property
    def user(self) -> TelegramUser | None:
        return self.get("user")

    @property
    def receiver(self) -> TelegramUser | None:
        return self.get("receiver")

    @property
    def chat(self) -> TelegramChat | None:
        return self.get("chat")

    @property
    def query_id(self) -> str | None:
        return self.get("query_id")

    @property
    def start_param(self) -> str | None:
        return self.get("start_param")

    @property
    def chat_type(self) -> ChatType | None:
        return self.get("chat_type")

    @property
    def chat_instance(self) -> str | None:
        return self.get("chat_instance")

    @property
    def can_send_after(self) -> str | None:
        return self.get("can_send_after")

    def to_dict(self) -> dict[str, Any]:
        """Deep copy of the fields, safe to mutate or serialize."""
        return copy.deepcopy(self._fields)


def decode_fields(fields: dict[str, str], signature: str) -> InitData:
    """Decode verified raw fields via FIELD_SCHEMA and reattach the hash."""
    decoded = {}
    for name, raw in fields.items():
        decoder = FIELD_SCHEMA.get(name, _decode_str)
        decoded[name] = decoder(name, raw)
    decoded["hash"] = signature
    return InitData(decoded)
