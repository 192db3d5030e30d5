"""
ASGI application for cardpt.

Serves the session engine routes and the decision proposal route. CORS is
left wide open for local front-ends.
"""

import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cardpt import __version__
from cardpt.server.routes import router

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Build the FastAPI app with middleware and routes attached."""
    app = FastAPI(
        title="cardpt",
        description="Deterministic Hold'em engine with a gated decision gateway",
        version=__version__,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)

    logger.info(f"cardpt {__version__} app ready with {len(app.routes)} routes")
    return app


app = create_app()
