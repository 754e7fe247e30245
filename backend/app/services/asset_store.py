import hashlib
import logging
import time
from dataclasses import dataclass
from typing import Protocol
import httpx
from app.core.config import Settings
from app.core.errors import ServerMisconfigured, UpstreamAssetError

logger = logging.getLogger(__name__)


@dataclass
class StoredAsset:
    url: str
    public_id: str


class AssetStore(Protocol):
    def upload(self, filename: str, content: bytes) -> StoredAsset:
        ...

    def destroy(self, public_id: str) -> None:
        ...


class CloudinaryAssetStore:
    """PDFs are stored as Cloudinary ``raw`` resources."""

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        folder: str = "library_pdfs",
        timeout: int = 60,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder
        self.timeout = timeout
        self.transport = transport

    @property
    def base_url(self) -> str:
        return f"https://api.cloudinary.com/v1_1/{self.cloud_name}/raw"

    def _sign(self, params: dict[str, str]) -> str:
        payload = "&".join(f"{key}={params[key]}" for key in sorted(params))
        return hashlib.sha1((payload + self.api_secret).encode("utf-8")).hexdigest()

    def _signed(self, params: dict[str, str]) -> dict[str, str]:
        params = {**params, "timestamp": str(int(time.time()))}
        return {**params, "api_key": self.api_key, "signature": self._sign(params)}

    def _post(self, action: str, data: dict[str, str], files: dict | None = None) -> dict:
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(f"{self.base_url}/{action}", data=data, files=files)
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPError as exc:
            raise UpstreamAssetError(f"Asset store {action} failed", details=str(exc)) from exc
        except ValueError as exc:
            raise UpstreamAssetError(f"Asset store {action} returned a non-JSON response", details=str(exc)) from exc
        if not isinstance(body, dict):
            raise UpstreamAssetError(f"Asset store {action} returned an unexpected response", details=str(body))
        return body

    def upload(self, filename: str, content: bytes) -> StoredAsset:
        data = self._signed({"folder": self.folder})
        files = {"file": (filename, content, "application/pdf")}
        body = self._post("upload", data, files)
        if "secure_url" not in body or "public_id" not in body:
            raise UpstreamAssetError("Asset store upload returned an unexpected response")
        logger.info("Asset uploaded", extra={"public_id": body["public_id"]})
        return StoredAsset(url=body["secure_url"], public_id=body["public_id"])

    def destroy(self, public_id: str) -> None:
        body = self._post("destroy", self._signed({"public_id": public_id}))
        result = body.get("result")
        if result == "not found":
            logger.warning("Asset already gone", extra={"public_id": public_id})
        elif result != "ok":
            raise UpstreamAssetError(f"Asset store refused to delete {public_id}", details=str(body))
        else:
            logger.info("Asset deleted", extra={"public_id": public_id})


class UnconfiguredAssetStore:
    def upload(self, filename: str, content: bytes) -> StoredAsset:
        raise ServerMisconfigured("Asset store is not configured.")

    def destroy(self, public_id: str) -> None:
        raise ServerMisconfigured("Asset store is not configured.")


def get_asset_store(settings: Settings) -> AssetStore:
    if settings.cloudinary_cloud_name and settings.cloudinary_api_key and settings.cloudinary_api_secret:
        logger.info("Using Cloudinary asset store")
        return CloudinaryAssetStore(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            folder=settings.cloudinary_folder,
            timeout=settings.asset_timeout,
        )
    logger.warning("Cloudinary credentials missing; PDF operations are disabled")
    return UnconfiguredAssetStore()
