import argparse
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gateway_common.observability import (
    get_logger,
    init_observability,
    level_from_env,
    shutdown_tracing,
)

from query_service.app.config import VERSION, get_settings
from query_service.app.core.errors import QueryError
from query_service.app.dependencies import close_gateway
from query_service.app.routes import graph_router, health_router

# Bootstrap logging + tracing + service-info in one call
init_observability("query-gateway", VERSION, log_level=level_from_env())

logger = get_logger("query-gateway")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info(
        "Query gateway v%s starting (backends: %s)",
        VERSION,
        ", ".join(settings.backends),
    )

    yield

    close_gateway()
    # Flush remaining traces before shutdown
    shutdown_tracing()


app = FastAPI(
    title="Metrics Query Gateway",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_allow_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS", "PUT"],
    allow_headers=["*"],
)

app.include_router(graph_router)
app.include_router(health_router)


@app.exception_handler(QueryError)
async def query_error_handler(request: Request, exc: QueryError):
    if exc.status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.detail)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc.code)
    return JSONResponse(status_code=exc.status_code, content={"msg": exc.code})


# Initialize telemetry at module level (before requests start)
try:
    from query_service.app import telemetry
    telemetry.init(app)
except Exception as e:
    logger.warning(f"Telemetry init skipped: {e}")


def run():
    """Entry point of the ``query-gateway`` console script."""
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Metrics query gateway")
    parser.add_argument("-v", "--version", action="store_true", help="show version and exit")
    parser.add_argument("--host", default=settings.http_host, help="listen address")
    parser.add_argument("--port", type=int, default=settings.http_port, help="listen port")
    args = parser.parse_args()

    if args.version:
        print(VERSION)
        return

    logger.info("Listening on %s:%d", args.host, args.port)
    # log_config=None keeps the JSON root handler for uvicorn loggers too
    uvicorn.run(app, host=args.host, port=args.port, access_log=False, log_config=None)


if __name__ == "__main__":
    run()
