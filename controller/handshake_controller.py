# controller/handshake_controller.py
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from model.api import (
    ConfirmResult,
    ExchangeResult,
    Failable,
    InitFlowRequest,
    IssueResult,
    SessionRequest,
    UploadRequest,
)
from service.handshake_coordinator import HandshakeCoordinator
from util.constants import InternalURIs
from util.enums import ErrorMessage, FlowType
from controller.controller_dependencies import get_coordinator, handshake_rate_limiter

handshake_router = APIRouter(dependencies=[Depends(handshake_rate_limiter)])


def _respond(result: Failable) -> JSONResponse:
    # Failures keep their body; only the status code changes.
    status_code = 200
    if not result.success and result.error is not None:
        status_code = ErrorMessage.for_failure(result.error).http_status
    return JSONResponse(
        status_code=status_code, content=result.model_dump(mode="json", exclude_none=True)
    )


@handshake_router.post(InternalURIs.RESET_CONFIRM, response_model=ConfirmResult)
async def confirm_reset(
    coordinator: HandshakeCoordinator = Depends(get_coordinator),
):
    return _respond(await coordinator.confirm())


@handshake_router.post(InternalURIs.INIT, response_model=IssueResult)
async def init_flow(
    flow: FlowType,
    payload: InitFlowRequest,
    coordinator: HandshakeCoordinator = Depends(get_coordinator),
):
    return _respond(await coordinator.issue(flow, payload.email))


@handshake_router.post(InternalURIs.UPLOAD, response_model=Failable)
async def upload_credential(
    flow: FlowType,
    payload: UploadRequest,
    coordinator: HandshakeCoordinator = Depends(get_coordinator),
):
    return _respond(await coordinator.upload(flow, payload.token, payload.apiKey))


@handshake_router.post(InternalURIs.SESSION, response_model=ExchangeResult)
async def setup_session(
    flow: FlowType,
    payload: SessionRequest,
    coordinator: HandshakeCoordinator = Depends(get_coordinator),
):
    return _respond(await coordinator.exchange(flow, payload.token))
