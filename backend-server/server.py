# server.py
import logging
from contextlib import AsyncExitStack, asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from streams_api.api import health as health_router
from streams_api.api import topics as topics_router
from streams_api.core.config import Settings, get_settings
from streams_api.core.errors import install_exception_handlers
from streams_api.core.logging import configure_logging
from streams_api.domain.services.consumer import Consumer
from streams_api.domain.services.offset_allocator import OffsetAllocator
from streams_api.domain.services.producer import Producer
from streams_api.infra.factory import open_backends

logger = logging.getLogger("streams_api.server")

# API Gateway stage prefix the routes are also served under
STAGE_PREFIX = "/v1"


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    # Lifespan handler builds the collaborators once; they are shared by every request
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level, settings.log_format)
        async with AsyncExitStack() as stack:
            counter, store = await open_backends(settings, stack)
            app.state.counter = counter
            app.state.store = store
            app.state.producer = Producer(OffsetAllocator(counter), store)
            app.state.consumer = Consumer(
                store,
                max_concurrent_reads=settings.max_concurrent_reads,
                max_limit=settings.max_consume_limit,
                default_limit=settings.default_consume_limit,
            )
            logger.info(
                "Service initialized",
                extra={
                    "backend": settings.storage_backend,
                    "bucket": settings.bucket_name,
                    "table": settings.counters_table,
                },
            )
            yield
        logger.info("Service stopped")

    app = FastAPI(
        title="Serverless Streams API",
        version="1.0.0",
        lifespan=lifespan,
    )

    # --- CORS (configurable via settings.cors_allow_origins) ---
    allow_origins = settings.cors_allow_origins or [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info("Incoming request", extra={"method": request.method, "path": request.url.path})
        return await call_next(request)

    install_exception_handlers(app)

    app.include_router(health_router.router)
    app.include_router(topics_router.router)
    app.include_router(health_router.router, prefix=STAGE_PREFIX, include_in_schema=False)
    app.include_router(topics_router.router, prefix=STAGE_PREFIX, include_in_schema=False)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("server:app", host="0.0.0.0", port=8000, reload=True)
