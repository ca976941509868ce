import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from app.config import settings
from app.core.dependencies import PORTAL_SESSION_HEADER
from app.core.errors import SessionExpiredError
from app.modules.session import registry
from app.modules.session.service import holds_token
from app.modules.auth import routes as auth_routes
from app.modules.session import routes as session_routes
from app.modules.profiles import routes as profiles_routes
from app.modules.requests import routes as requests_routes
from app.modules.assets import routes as assets_routes
from app.modules.clients import routes as clients_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
app = FastAPI(title=settings.app_name, debug=settings.debug)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(SessionExpiredError)
async def session_expired_handler(request: Request, exc: SessionExpiredError):
    """Authoritative expiry: end the portal session the rejected token belongs to, if any."""
    gate = registry.get_gate(request.headers.get(PORTAL_SESSION_HEADER))
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if gate is not None and scheme.lower() == "bearer" and holds_token(gate, token.strip()):
        gate.authority.handle_possible_session_error(exc)
    return JSONResponse(status_code=401, content={"detail": exc.message, "session_expired": True})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    if settings.is_production:
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
    return JSONResponse(status_code=500, content={"detail": str(exc)})


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                    (b"X-XSS-Protection", b"1; mode=block"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include module routes
app.include_router(auth_routes.router, prefix="/api/v1")
app.include_router(session_routes.router, prefix="/api/v1")
app.include_router(profiles_routes.router, prefix="/api/v1")
app.include_router(requests_routes.router, prefix="/api/v1")
app.include_router(assets_routes.router, prefix="/api/v1")
app.include_router(clients_routes.router, prefix="/api/v1")


@app.on_event("shutdown")
async def shutdown_event():
    registry.clear()
    logger.info("Application shutdown")


@app.get("/")
async def root():
    return {"message": "Welcome to design-hub-backend", "status": "healthy"}


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready():
    """Readiness check: extend here with DB checks if needed."""
    return {"status": "ready"}
