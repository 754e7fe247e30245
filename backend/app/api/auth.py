from fastapi import APIRouter, Depends
from app.api.deps import get_verifier
from app.core.security import CredentialVerifier
from app.schemas.auth import LoginRequest, TokenOut

router = APIRouter()


@router.post("/auth/login", response_model=TokenOut)
def login(payload: LoginRequest, verifier: CredentialVerifier = Depends(get_verifier)):
    return TokenOut(token=verifier.issue(payload.username, payload.password))
