import logging
from contextlib import asynccontextmanager

import redis.asyncio as redis
import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from redis.exceptions import RedisError
from sqlalchemy import text

from subtrack.config import settings
from subtrack.database import engine

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize Sentry
if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENVIRONMENT,
        traces_sample_rate=0.2 if settings.ENVIRONMENT == "production" else 1.0,
        send_default_pii=False,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: verify DB connection and connect Redis
    async with engine.begin() as conn:
        await conn.execute(text("SELECT 1"))

    app.state.redis = redis.from_url(settings.REDIS_URL, decode_responses=True)
    try:
        await app.state.redis.ping()
    except (RedisError, OSError) as exc:
        logger.warning("Redis unreachable, rate limiting disabled: %s", exc)
        await app.state.redis.close()
        app.state.redis = None

    logger.info("Subtrack API started (environment=%s)", settings.ENVIRONMENT)
    yield

    # Shutdown
    if app.state.redis is not None:
        await app.state.redis.close()
    await engine.dispose()


app = FastAPI(
    title="Subtrack API",
    version="0.1.0",
    lifespan=lifespan,
)

# Middleware
from subtrack.middleware.rate_limit import RateLimitMiddleware  # noqa: E402

app.add_middleware(RateLimitMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

from subtrack.middleware.error_handler import register_error_handlers  # noqa: E402

register_error_handlers(app)

# Routers
from subtrack.routers.subscriptions import router as subscriptions_router  # noqa: E402

app.include_router(subscriptions_router)


@app.get("/health")
async def health():
    return {"status": "ok"}
