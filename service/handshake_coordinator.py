# service/handshake_coordinator.py
import logging
from config.settings import settings
from model.api import ConfirmResult, ExchangeResult, Failable, IssueResult
from repository.namespaces import flow_key
from repository.token_store import CasOutcome, TokenStore
from service.identity_service_client import IdentityServiceClient
from service.session_issuer import SessionIssuer
from util.constants import CONSUMED_SENTINEL, PENDING_SENTINEL
from util.enums import FailureKind, FlowType
from util.errors import RemoteServiceError
from util.functions import (
    is_valid_credential,
    is_valid_email,
    is_valid_token_id,
    new_token_id,
    short_id,
)

logger = logging.getLogger(__name__)


class HandshakeCoordinator:
    """
    Three-phase handshake per flow: issue -> upload -> exchange.

    Slot lifecycle for key "<flow>:<tokenId>":
      Absent -> Pending ("pending") -> Filled (credential) -> Consumed ("consumed")
    Every transition is one conditional store write.
    Every state lapses to Absent when the store TTL runs out. The consumed
    marker only lets a replayed exchange be told apart from a never-issued
    token; it carries no credential.

    Register and restore reserve their slot at issue time. Reset only
    reserves it in confirm(), once the identity service has acknowledged
    the reset email out of band.

    Expected failures come back as result bodies. InfrastructureError from
    the store is not caught here.
    """

    def __init__(
        self,
        store: TokenStore,
        remote: IdentityServiceClient,
        sessions: SessionIssuer,
        tmp_ttl_seconds: int = settings.TMP_STORAGE_TTL_SECONDS,
    ) -> None:
        self._store = store
        self._remote = remote
        self._sessions = sessions
        self._tmp_ttl = int(tmp_ttl_seconds)

    # ---------------- Phase 1: reserve ----------------

    async def issue(self, flow: FlowType, email: str) -> IssueResult:
        if not is_valid_email(email):
            logger.warning("handshake.issue.invalid flow=%s", flow.value)
            return IssueResult.fail(FailureKind.INVALID_INPUT)
        email = email.strip()
        upload_url = self._remote.upload_url(flow)

        if flow is FlowType.reset:
            try:
                await self._remote.acknowledge(email)
            except RemoteServiceError:
                logger.error("handshake.issue.remote_error flow=%s", flow.value)
                return IssueResult.fail(FailureKind.REMOTE_SERVICE)
            logger.info("handshake.issue.ok flow=%s", flow.value)
            return IssueResult.ok(uploadUrl=upload_url)

        token_id = new_token_id()
        key = flow_key(flow, token_id)
        await self._store.set_with_ttl(key, PENDING_SENTINEL, self._tmp_ttl)
        try:
            remote_token = await self._remote.start(flow, email)
        except RemoteServiceError:
            # Drop the reservation so no orphaned Pending slot outlives the call.
            await self._store.compare_and_delete(key, PENDING_SENTINEL)
            logger.error(
                "handshake.issue.remote_error flow=%s token=%s rolled_back=true",
                flow.value,
                short_id(token_id),
            )
            return IssueResult.fail(FailureKind.REMOTE_SERVICE)

        logger.info("handshake.issue.ok flow=%s token=%s", flow.value, short_id(token_id))
        return IssueResult.ok(
            tokenId=token_id, uploadUrl=upload_url, remoteFlowToken=remote_token
        )

    async def confirm(self) -> ConfirmResult:
        """Reserve a reset slot after the identity service confirmed the email."""
        token_id = new_token_id()
        await self._store.set_with_ttl(
            flow_key(FlowType.reset, token_id), PENDING_SENTINEL, self._tmp_ttl
        )
        logger.info("handshake.confirm.ok flow=reset token=%s", short_id(token_id))
        return ConfirmResult.ok(tokenId=token_id)

    # ---------------- Phase 2: fill ----------------

    async def upload(self, flow: FlowType, token_id: str, credential: str) -> Failable:
        if not is_valid_token_id(token_id) or not is_valid_credential(credential):
            logger.warning("handshake.upload.invalid flow=%s", flow.value)
            return Failable.fail(FailureKind.INVALID_INPUT)

        outcome = await self._store.compare_and_set(
            flow_key(flow, token_id), PENDING_SENTINEL, credential, self._tmp_ttl
        )
        if outcome is not CasOutcome.OK:
            logger.info(
                "handshake.upload.not_pending flow=%s token=%s",
                flow.value,
                short_id(token_id),
            )
            return Failable.fail(FailureKind.NOT_PENDING)

        logger.info("handshake.upload.ok flow=%s token=%s", flow.value, short_id(token_id))
        return Failable.ok()

    # ---------------- Phase 3: consume ----------------

    async def exchange(self, flow: FlowType, token_id: str) -> ExchangeResult:
        if not is_valid_token_id(token_id):
            logger.warning("handshake.exchange.invalid flow=%s", flow.value)
            return ExchangeResult.fail(FailureKind.INVALID_INPUT)

        key = flow_key(flow, token_id)
        credential = await self._store.get(key)
        if credential == CONSUMED_SENTINEL:
            logger.info(
                "handshake.exchange.replayed flow=%s token=%s",
                flow.value,
                short_id(token_id),
            )
            return ExchangeResult.fail(FailureKind.ALREADY_CONSUMED)
        if credential is None or credential == PENDING_SENTINEL:
            logger.info(
                "handshake.exchange.not_ready flow=%s token=%s",
                flow.value,
                short_id(token_id),
            )
            return ExchangeResult.fail(FailureKind.NOT_READY)

        # Mint before consuming: if minting fails the slot is still Filled
        # and the caller can retry. The swap to the consumed marker is
        # the single atomic step that picks the winner.
        grant = await self._sessions.mint(credential)
        outcome = await self._store.compare_and_set(
            key, credential, CONSUMED_SENTINEL, self._tmp_ttl
        )
        if outcome is not CasOutcome.OK:
            await self._sessions.discard(grant.sessionId)
            logger.info(
                "handshake.exchange.already_consumed flow=%s token=%s",
                flow.value,
                short_id(token_id),
            )
            return ExchangeResult.fail(FailureKind.ALREADY_CONSUMED)

        logger.info(
            "handshake.exchange.ok flow=%s token=%s", flow.value, short_id(token_id)
        )
        return ExchangeResult.ok(sessionId=grant.sessionId, expiresIn=grant.expiresIn)
