from fastapi import FastAPI, Request


def add_security_headers(app: FastAPI, media_prefix: str = "/storage"):
    @app.middleware("http")
    async def security_headers_mw(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer-when-downgrade"
        if request.url.path.startswith(media_prefix):
            # user-uploaded files: never let them run as documents
            response.headers["Content-Security-Policy"] = "default-src 'none'; img-src 'self'; sandbox"
        return response
