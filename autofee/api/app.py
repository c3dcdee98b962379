"""FastAPI application for the billing tool."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from autofee import __version__
from autofee.api.errors import autofee_error_handler
from autofee.api.routes import router
from autofee.services import BillingContext
from autofee.services.errors import AutofeeError

logger = logging.getLogger(__name__)


def create_app(context: BillingContext) -> FastAPI:
    """Create the API bound to one store.

    Args:
        context: Store handle and services every request works against
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Billing API started")
        yield
        context.store.close()
        logger.info("Billing API stopped")

    app = FastAPI(
        title="Autofee",
        description="Condo utility-fee billing: units, meter readings, allocation, statements",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.context = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AutofeeError, autofee_error_handler)
    app.include_router(router)

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok", "initialized": context.store.is_initialized}

    return app
