# main.py
from fastapi_limiter import FastAPILimiter
import routes
from contextlib import asynccontextmanager
from util.enums import Environment, Color, ErrorMessage
from fastapi import FastAPI, Request
from starlette.middleware.cors import CORSMiddleware
from config.settings import settings
from config.cache import close_redis, open_redis
from fastapi.responses import JSONResponse
from repository.token_store import RedisTokenStore
from service.handshake_coordinator import HandshakeCoordinator
from service.identity_service_client import IdentityServiceClient
from service.session_issuer import SessionIssuer
from util.errors import InfrastructureError
from util.logger import init_logger


async def _real_ip(request: Request) -> str:
    if settings.TRUST_PROXY:
        fwd = request.headers.get("x-forwarded-for")
        if fwd:
            return fwd.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


@asynccontextmanager
async def lifespan(fastApi: FastAPI):
    logger = init_logger()
    redis = None
    try:
        print(f"{Color.GREEN}Initializing...{Color.RESET}")
        redis = await open_redis(settings.REDIS_URL)
        await FastAPILimiter.init(redis, identifier=_real_ip)

        remote = IdentityServiceClient()
        integration = await remote.fetch_integration()
        logger.info("bootstrap.integration.ok id=%s", integration.id)

        store = RedisTokenStore(redis, prefix=settings.REDIS_PREFIX)
        fastApi.state.coordinator = HandshakeCoordinator(
            store, remote, SessionIssuer(store)
        )
        print(f"{Color.BLUE}Server Started{Color.RESET}")
    except Exception as e:
        print("Startup failed:", e)
        await close_redis(redis)
        raise

    try:
        yield
    finally:
        try:
            await close_redis(redis)
        except Exception as e:
            print("Error closing Redis:", e)

        print(f"{Color.RED}Server Shutdown{Color.RESET}")


app: FastAPI = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.ALLOWED_ORIGIN],
    allow_credentials=True,  # Allow cookies and other credentials
    allow_methods=["GET", "POST"],  # Allowed HTTP Methods
    allow_headers=["Authorization", "Content-Type", "Accept"],  # Allowed HTTP Headers
)


@app.get("/healthz")
async def healthz():
    return {"ok": True}


@app.exception_handler(InfrastructureError)
async def infrastructure_error_handler(request: Request, exc: InfrastructureError):
    info = ErrorMessage.STORE_UNAVAILABLE.value
    return JSONResponse(
        status_code=info.http_status,
        content={"success": False, "error": "store-unavailable", "message": info.message},
    )


@app.exception_handler(429)
async def ratelimit_handler(request: Request, exc):
    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "error": "rate_limited",
            "message": "Too many requests. Try again later.",
        },
        headers={"Retry-After": str(settings.RATE_LIMIT_SECONDS)},
    )


routes.register_routes(app)

if __name__ == "__main__":
    import uvicorn

    reload = settings.APP_ENV == Environment.DEV
    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=reload)
