from fastapi.middleware.cors import CORSMiddleware

from product_form.config import settings


def cors_origins():
    origins = [o.strip() for o in (settings.CORS_ORIGINS or "").split(",") if o.strip()]
    # TODO : in production, set CORS_ORIGINS to the actual allowed origins
    if not origins:
        origins = ["http://localhost:3000"]
    return origins


def configure_cors(app):
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        max_age=86400,
    )
