from fastapi import Request

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer-when-downgrade",
}


def add_security_headers(app, no_store_prefix: str = "/api/form"):
    """
    Adds the basic hardening headers everywhere, and marks form responses
    as uncacheable since they carry the user's unsaved draft and preview.
    """
    @app.middleware("http")
    async def security_headers_mw(request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers[name] = value
        if request.url.path.startswith(no_store_prefix):
            response.headers["Cache-Control"] = "no-store"
        return response
