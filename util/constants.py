class InternalURIs:
    API = "/api"
    V1 = API + "/v1"
    FLOW = V1 + "/{flow}"
    INIT = FLOW + "/init"
    UPLOAD = FLOW + "/upload"
    SESSION = FLOW + "/session"
    RESET_CONFIRM = V1 + "/reset/confirm"


class ExternalURIs:
    INTEGRATION = "/integrations/{integration_id}"
    UPLOAD = "/upload/{flow}"


PENDING_SENTINEL = "pending"
CONSUMED_SENTINEL = "consumed"
MAX_TOKEN_ID_LENGTH = 128
MAX_CREDENTIAL_LENGTH = 4096
