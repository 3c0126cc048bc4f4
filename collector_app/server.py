"""
Application assembly and serving.

create_app() wires the hit route behind the middleware chain with an
already initialized storage client. serve() runs it under uvicorn, either
plain or as HTTPS with a second server redirecting the plain port.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import List

from fastapi import FastAPI, Request, status
from fastapi.responses import PlainTextResponse, RedirectResponse
from uvicorn import Config
from uvicorn.server import Server

from collector_app.api import hits
from collector_app.config import Settings
from collector_app.exceptions import ConfigurationError, HitStorageError
from collector_app.middleware import install_middleware
from collector_app.storage.strategies import HitStorageStrategy

logger = logging.getLogger(__name__)


async def hit_storage_error_handler(request: Request, exc: HitStorageError):
    # Already logged with traceback by HitService
    return PlainTextResponse("Internal Server Error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


def create_app(settings: Settings, storage: HitStorageStrategy) -> FastAPI:
    """
    Build the collector app around an initialized storage client.

    The app owns the client from here on and disposes it at shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        app.state.hit_storage.close()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Records page hits posted as form fields",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.hit_storage = storage

    install_middleware(app, settings)
    app.add_exception_handler(HitStorageError, hit_storage_error_handler)
    app.include_router(hits.router)
    return app


def https_redirect_url(host: str, path: str, query: str, https_port: int) -> str:
    """
    Target for a plain HTTP request: same host without its port, the HTTPS
    port when it is not 443, same path and query.
    """
    if host.startswith("["):
        hostname = host[: host.index("]") + 1]
    else:
        hostname = host.rsplit(":", 1)[0]

    target = f"https://{hostname}"
    if https_port != 443:
        target += f":{https_port}"
    target += path or "/"
    if query:
        target += f"?{query}"
    return target


def create_redirect_app(settings: Settings) -> FastAPI:
    """Plain-port app that sends everything to HTTPS"""
    app = FastAPI(docs_url=None, redoc_url=None, openapi_url=None)

    @app.api_route("/{full_path:path}", methods=hits.ALL_METHODS)
    async def redirect_to_https(request: Request):
        target = https_redirect_url(
            host=request.headers.get("host") or settings.domain,
            path=request.url.path,
            query=request.url.query,
            https_port=settings.https_port,
        )
        logger.info("redirect to: %s", target)
        return RedirectResponse(target, status_code=status.HTTP_307_TEMPORARY_REDIRECT)

    return app


def build_servers(settings: Settings, app: FastAPI) -> List[Server]:
    """
    Uvicorn servers for the configured mode.

    Raises:
        ConfigurationError: TLS is on but the certificate or key is missing
    """
    if not settings.tls_enabled:
        logger.info("Serving HTTP at %s:%s", settings.domain, settings.listen_port)
        return [Server(Config(app=app, host=settings.host, port=settings.listen_port, log_config=None))]

    certfile, keyfile = settings.certfile_path, settings.keyfile_path
    for path in (certfile, keyfile):
        if not path.is_file():
            raise ConfigurationError(f"TLS is enabled but {path} does not exist")

    logger.info("Serving HTTP at %s:%s", settings.domain, settings.listen_port)
    redirect = Config(
        app=create_redirect_app(settings),
        host=settings.host,
        port=settings.listen_port,
        log_config=None,
    )

    logger.info("Serving HTTPS at %s:%s", settings.domain, settings.https_port)
    secure = Config(
        app=app,
        host=settings.host,
        port=settings.https_port,
        ssl_certfile=str(certfile),
        ssl_keyfile=str(keyfile),
        log_config=None,
    )
    return [Server(redirect), Server(secure)]


async def _serve_all(servers: List[Server]) -> None:
    tasks = [asyncio.create_task(server.serve()) for server in servers]
    _, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)

    # One server stopping (signal or failure) stops the rest
    for server in servers:
        server.should_exit = True
    if pending:
        await asyncio.wait(pending)


def serve(settings: Settings, app: FastAPI) -> None:
    servers = build_servers(settings, app)
    asyncio.run(_serve_all(servers))
