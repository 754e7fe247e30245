from typing import TypeVar
from fastapi import Depends, Header, Request
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from app.core.config import Settings
from app.core.errors import ValidationError
from app.core.security import CredentialVerifier, bearer_token
from app.services.asset_store import AssetStore

ModelT = TypeVar("ModelT", bound=BaseModel)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_asset_store(request: Request) -> AssetStore:
    return request.app.state.asset_store


def get_verifier(request: Request) -> CredentialVerifier:
    return request.app.state.verifier


def require_admin(
    authorization: str | None = Header(None),
    verifier: CredentialVerifier = Depends(get_verifier),
) -> dict:
    return verifier.verify(bearer_token(authorization))


def parse_body(model: type[ModelT], payload: object) -> ModelT:
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError("Invalid request body.", details=str(exc)) from exc
