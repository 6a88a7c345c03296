# service/identity_service_client.py
import logging
from typing import Any, Dict, Optional
import httpx
from config.settings import settings
from model.integration import Integration
from util.constants import ExternalURIs
from util.enums import FlowType
from util.errors import RemoteServiceError
from util.timing import timed

logger = logging.getLogger(__name__)

# Response field carrying the service-side flow token, per flow.
_FLOW_TOKEN_FIELDS: Dict[FlowType, str] = {
    FlowType.register: "SVCRegisterToken",
    FlowType.restore: "SVCRestoreToken",
}


class IdentityServiceClient:
    """
    Proxy to the remote identity service, scoped to one integration.

    Construction does no I/O; call fetch_integration() explicitly at startup.
    Every failure (transport, non-2xx, unreadable body) raises RemoteServiceError.
    """

    def __init__(
        self,
        *,
        host: str = settings.AUTHSERVICE_SERVICE_HOST,
        integration_id: str = settings.AUTHSERVICE_INTEGRATION_ID,
        api_key: Optional[str] = None,
        timeout: float = settings.IDENTITY_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        api_key = api_key or settings.AUTHSERVICE_INTEGRATION_API_KEY
        if not api_key:
            raise ValueError("Api key is required")
        self._api_key = api_key
        self._host = host.rstrip("/")
        self._url = self._host + ExternalURIs.INTEGRATION.format(
            integration_id=integration_id
        )
        self._timeout = httpx.Timeout(timeout, connect=5.0)
        self._transport = transport

    @property
    def url(self) -> str:
        return self._url

    def upload_url(self, flow: FlowType) -> str:
        return self._host + ExternalURIs.UPLOAD.format(flow=flow.value)

    async def _request(
        self, method: str, url: str, payload: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                res = await client.request(method, url, headers=headers, json=payload)
        except httpx.RequestError as e:
            logger.error("identity.request_error err=%s", type(e).__name__)
            raise RemoteServiceError("Identity service request failed") from e

        if res.status_code // 100 != 2:
            logger.error("identity.bad_status status=%d", res.status_code)
            raise RemoteServiceError(
                "Identity service error", status_code=res.status_code
            )

        if not res.content:
            return {}
        try:
            data = res.json()
        except ValueError as e:
            logger.error("identity.bad_body status=%d", res.status_code)
            raise RemoteServiceError(
                "Identity service returned a non-JSON body", res.status_code
            ) from e
        if not isinstance(data, dict):
            raise RemoteServiceError(
                "Identity service returned an unexpected body", res.status_code
            )
        return data

    async def fetch_integration(self) -> Integration:
        with timed(logger, "identity.integration"):
            data = await self._request("GET", self._url)
        try:
            return Integration.model_validate(data)
        except ValueError as e:
            raise RemoteServiceError("Malformed integration record") from e

    async def start(self, flow: FlowType, email: str) -> str:
        """
        Start a register/restore flow server-side and return the
        service's flow-scoped token.
        """
        field = _FLOW_TOKEN_FIELDS.get(flow)
        if field is None:
            raise ValueError(f"flow {flow.value} has no remote start step")
        with timed(logger, "identity.start", flow=flow.value):
            data = await self._request("POST", f"{self._url}/{flow.value}", {"email": email})
        token = data.get(field)
        if not isinstance(token, str) or not token:
            logger.error("identity.start.missing_token flow=%s", flow.value)
            raise RemoteServiceError(f"Identity service response lacks {field}")
        return token

    async def acknowledge(self, email: str) -> None:
        """Ask the service to send the reset confirmation email."""
        with timed(logger, "identity.reset"):
            data = await self._request(
                "POST", f"{self._url}/{FlowType.reset.value}", {"email": email}
            )
        if data.get("success") is False:
            logger.error("identity.reset.rejected")
            raise RemoteServiceError("Identity service rejected the reset request")
