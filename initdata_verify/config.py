from dataclasses import dataclass


@dataclass
class Config:
    bot_token: str
    expires_in: int | None = None
    api_host: str = "0.0.0.0"
    api_port: int = 8080
    cors_origin: str = "*"


def _parse_expires_in(raw: str) -> int | None:
    """Blank or zero disables the freshness check."""
    raw = raw.strip()
    if not raw:
        return None
    value = int(raw)
    if value < 0:
        raise ValueError(f"expires_in must not be negative, got {value}")
    return value or None


def load_config(config) -> Config:
    """Build a Config from a parsed configparser object."""
    bot_token = config["TELEGRAM"]["bot_token"].strip()
    expires_in = _parse_expires_in(config["TELEGRAM"].get("expires_in", ""))

    api_host = "0.0.0.0"
    api_port = 8080
    cors_origin = "*"
    if config.has_section("API"):
        api_host = config["API"].get("host", api_host).strip() or api_host
        api_port = int(config["API"].get("port", "").strip() or api_port)
        cors_origin = config["API"].get("cors_origin", cors_origin).strip() or cors_origin

    return Config(
        bot_token=bot_token,
        expires_in=expires_in,
        api_host=api_host,
        api_port=api_port,
        cors_origin=cors_origin,
    )
