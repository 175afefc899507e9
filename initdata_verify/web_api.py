"""HTTP API for a Telegram Mini App backend.

Exposes initData verification over HTTP so the Mini App frontend can
authenticate with `Authorization: tma <initData>`. Uses aiohttp.
"""

import time

from aiohttp import web

from .config import Config
from .errors import InvalidInput
from .web_auth import ValidationResult, validate_init_data


AUTH_SCHEME = "tma "
CORS_METHODS = "GET, POST, OPTIONS"
CORS_HEADERS = "Authorization, Content-Type"


def _extract_init_data(request: web.Request) -> ValidationResult:
    """Validate the initData carried in the Authorization header.

    The failure kind is stored on the request for logging_middleware.
    """
    config: Config = request.app["config"]
    auth = request.headers.get("Authorization", "")
    if not auth.startswith(AUTH_SCHEME):
        result = ValidationResult(
            ok=False, error=InvalidInput("missing or invalid Authorization header"))
    else:
        result = validate_init_data(
            auth[len(AUTH_SCHEME):], config.bot_token, config.expires_in)
    if not result.ok:
        request["auth_failure"] = result.kind
    return result


def _unauthorized(result: ValidationResult) -> web.Response:
    return web.json_response(
        {"error": str(result.error), "kind": result.kind}, status=401)


async def handle_auth(request: web.Request) -> web.Response:
    """POST /api/auth — verify initData and return every decoded field."""
    result = _extract_init_data(request)
    if not result.ok:
        return _unauthorized(result)
    return web.json_response(result.data.to_dict())


async def handle_me(request: web.Request) -> web.Response:
    """GET /api/me — verify initData and return the user object."""
    result = _extract_init_data(request)
    if not result.ok:
        return _unauthorized(result)
    return web.json_response({"user": result.data.user})


async def handle_health(request: web.Request) -> web.Response:
    """GET /api/health — liveness plus the active freshness window."""
    config: Config = request.app["config"]
    return web.json_response({
        "status": "ok",
        "time": int(time.time()),
        "expires_in": config.expires_in,
    })


@web.middleware
async def cors_middleware(request: web.Request, handler) -> web.Response:
    """Let the Mini App origin call the API; preflights never hit handlers."""
    config: Config = request.app["config"]
    response = web.Response() if request.method == "OPTIONS" else await handler(request)
    response.headers.update({
        "Access-Control-Allow-Origin": config.cors_origin,
        "Access-Control-Allow-Methods": CORS_METHODS,
        "Access-Control-Allow-Headers": CORS_HEADERS,
    })
    return response


@web.middleware
async def logging_middleware(request: web.Request, handler) -> web.Response:
    """Log each request, with the failure kind for rejected initData."""
    start = time.monotonic()
    try:
        response = await handler(request)
    except Exception as e:
        print(f"[API] {request.method} {request.path} → ERROR: {e} "
              f"({(time.monotonic() - start) * 1000:.0f}ms)")
        raise
    elapsed = (time.monotonic() - start) * 1000
    failure = request.get("auth_failure")
    outcome = f"{response.status} {failure}" if failure else str(response.status)
    print(f"[API] {request.method} {request.path} → {outcome} ({elapsed:.0f}ms)")
    return response


def create_web_app(config: Config) -> web.Application:
    """Create and configure the aiohttp web application."""
    app = web.Application(middlewares=[logging_middleware, cors_middleware])
    app["config"] = config

    app.router.add_get("/api/health", handle_health)
    app.router.add_get("/api/me", handle_me)
    app.router.add_post("/api/auth", handle_auth)

    return app
