# controller/controller_dependencies.py
from fastapi import Request
from fastapi_limiter.depends import RateLimiter
from config.settings import settings
from service.handshake_coordinator import HandshakeCoordinator

handshake_rate_limiter = RateLimiter(
    times=settings.RATE_LIMIT_TIMES, seconds=settings.RATE_LIMIT_SECONDS
)


def get_coordinator(request: Request) -> HandshakeCoordinator:
    # Built once in the app lifespan and parked on app.state.
    return request.app.state.coordinator
