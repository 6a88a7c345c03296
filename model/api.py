# model/api.py
from pydantic import BaseModel
from util.enums import FailureKind


class InitFlowRequest(BaseModel):
    email: str


class UploadRequest(BaseModel):
    token: str
    apiKey: str


class SessionRequest(BaseModel):
    token: str


class Failable(BaseModel):
    """
    Result envelope for every handshake operation.
    success=False always carries an error kind; success=True never does.
    """

    success: bool
    error: FailureKind | None = None

    @classmethod
    def ok(cls, **fields):
        return cls(success=True, **fields)

    @classmethod
    def fail(cls, kind: FailureKind):
        return cls(success=False, error=kind)


class IssueResult(Failable):
    tokenId: str | None = None
    uploadUrl: str | None = None
    remoteFlowToken: str | None = None


class ConfirmResult(Failable):
    tokenId: str | None = None


class ExchangeResult(Failable):
    sessionId: str | None = None
    expiresIn: int | None = None


class SessionGrant(BaseModel):
    sessionId: str
    expiresIn: int
