# product_form/main.py
from fastapi import FastAPI
import logging
from contextlib import asynccontextmanager

from product_form.config import settings
from product_form.api.deps import get_controller
from product_form.api.routes import form as form_routes
from product_form.middleware.cors_config import configure_cors
from product_form.middleware.security_headers import add_security_headers


logger = logging.getLogger("uvicorn.error")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context: log the effective limits on startup and cancel any
    image read still running on shutdown.
    """
    logger.info(
        "Product form ready (env=%s, max image %s bytes, submit delay %.1fs)",
        settings.ENV, settings.MAX_IMAGE_BYTES, settings.SUBMIT_DELAY_SECONDS,
    )
    yield
    await get_controller().close()
    logger.info("Shutting down Product Form API")

app = FastAPI(title="Product Form API", version="0.1.0", lifespan=lifespan)
configure_cors(app)
add_security_headers(app)

app.include_router(form_routes.router)


@app.get("/", tags=["root"])
async def root():
    return {"status": "ok", "service": "Product Form API"}
