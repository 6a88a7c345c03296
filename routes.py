# routes.py
from fastapi import FastAPI
from controller.handshake_controller import handshake_router


def register_routes(app: FastAPI) -> None:
    """Mount the handshake router on the app."""
    app.include_router(handshake_router)
