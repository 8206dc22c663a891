# spotlight/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from spotlight.api.v1.api import api_router
from spotlight.core.config import settings
from spotlight.core.email import init_resend
from spotlight.core.limiter import limiter

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


# Schema is managed by alembic; startup only wires external clients.
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Spotlight service starting up (ENV={settings.ENV})")
    init_resend()
    yield
    logger.info("Spotlight service shutting down")


app = FastAPI(
    title="Jugnu Spotlight Service",
    version="1.0.0",
    description="""
        **Jugnu Spotlight**

        Sponsored placements for the community events site.

        ## Features

        * **Serving**: One winning campaign per placement
        * **Tracking**: Impression/click beacons with per-viewer frequency caps
        * **Click Redirects**: UTM tagging and click logging
        * **Sponsor Portal**: Token-gated analytics with peer CTR benchmark and CSV export
        * **Quotes & Applications**: Package pricing, promo codes and lead intake
        * **Admin**: Campaigns, promo codes, metrics and lead review

        ## Authentication

        Admin endpoints under `/spotlight/admin/` require the `X-Admin-Key` header.
        Portal endpoints are gated by the token in the path.
        """,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api")


@app.get("/")
def read_root():
    return {"status": "Spotlight Service is running"}
