import argparse
import configparser
import json
import sys

from aiohttp import web

from .config import Config, load_config
from .web_api import create_web_app
from .web_auth import validate_init_data


def check_payload(config: Config, init_data: str, expires_in: int | None) -> int:
    """Verify one payload, print the outcome and return an exit code."""
    result = validate_init_data(init_data.strip(), config.bot_token, expires_in)
    if not result.ok:
        print(f"[Auth] {result.kind}: {result.error}")
        return 1
    print(json.dumps(result.data.to_dict(), indent=2, ensure_ascii=False))
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(description="Telegram Mini App initData verifier")
    parser.add_argument("-c", "--config", type=str, default="config.ini", help="Path to config file")
    parser.add_argument("--check", type=str, metavar="INIT_DATA",
                        help="Verify a single initData string ('-' reads stdin) and exit")
    parser.add_argument("--expires-in", type=int, default=None,
                        help="Maximum payload age in seconds for --check")
    args = parser.parse_args(argv)

    config_file = configparser.ConfigParser()
    if not config_file.read(args.config):
        parser.error(f"cannot read config file: {args.config}")
    config = load_config(config_file)

    if args.check is not None:
        init_data = sys.stdin.read() if args.check == "-" else args.check
        expires_in = args.expires_in if args.expires_in is not None else config.expires_in
        sys.exit(check_payload(config, init_data, expires_in))

    app = create_web_app(config)
    print(f"HTTP API starting on {config.api_host}:{config.api_port}")
    web.run_app(app, host=config.api_host, port=config.api_port, print=None)


if __name__ == "__main__":
    main()
