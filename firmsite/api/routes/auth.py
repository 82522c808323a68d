from fastapi import APIRouter, Depends

from firmsite.api.deps import get_access_gate, require_admin
from firmsite.api.schemas import (
    Envelope,
    LoginData,
    LoginEnvelope,
    LoginRequest,
    VerifyData,
    VerifyEnvelope,
)
from firmsite.services.auth import AccessGate, Identity

router = APIRouter()


@router.post("/login", response_model=LoginEnvelope)
def login(
    credentials: LoginRequest,
    gate: AccessGate = Depends(get_access_gate),
) -> LoginEnvelope:
    """Exchange admin credentials for a bearer token."""
    token = gate.authenticate(credentials.username, credentials.password)
    return LoginEnvelope(
        message="Login successful",
        data=LoginData(token=token, username=credentials.username),
    )


@router.get("/verify", response_model=VerifyEnvelope)
def verify(identity: Identity = Depends(require_admin)) -> VerifyEnvelope:
    return VerifyEnvelope(
        message="Token valid",
        data=VerifyData(username=identity.username, role=identity.role),
    )


@router.post("/logout", response_model=Envelope)
def logout() -> Envelope:
    """Tokens are stateless; the client discards its copy."""
    return Envelope(message="Logout successful. Please remove token from client.")
