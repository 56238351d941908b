"""Content-addressed static asset publishing.

Publishing is two-phase:

1. The manifest (path -> digest and size) is submitted to open an upload
   session. The control plane answers with a session token and the digests
   it is missing, partitioned into buckets.
2. Each bucket is uploaded with the latest token seen. An upload response may
   carry a refreshed token; the last one seen is the completion token that
   the deploy call must reference.
"""

import base64
from dataclasses import dataclass
import hashlib
import mimetypes

import httpx

from ..exceptions import GatewayError
from ..logging_config import get_logger
from ..schemas import ManifestEntry, UploadReceipt, UploadSession
from .http import parse_envelope, send

logger = get_logger(__name__)

# sha256 truncated to 16 bytes -> 32 hex chars
DIGEST_BYTES = 16


@dataclass(frozen=True)
class StaticAsset:
    """A file served by the tenant app, addressed by its URL path."""

    path: str
    content: bytes
    content_type: str = "application/octet-stream"

    @classmethod
    def from_text(cls, path: str, text: str, content_type: str | None = None) -> "StaticAsset":
        if content_type is None:
            content_type = mimetypes.guess_type(path)[0] or "application/octet-stream"
        return cls(path=path, content=text.encode("utf-8"), content_type=content_type)


@dataclass(frozen=True)
class EncodedAsset:
    asset: StaticAsset
    payload: str
    digest: str

    @property
    def size(self) -> int:
        return len(self.asset.content)


def content_digest(data: bytes) -> str:
    """Truncated SHA-256 hex digest of raw asset bytes."""
    return hashlib.sha256(data).digest()[:DIGEST_BYTES].hex()


def encode_asset(asset: StaticAsset) -> EncodedAsset:
    return EncodedAsset(
        asset=asset,
        payload=base64.b64encode(asset.content).decode("ascii"),
        digest=content_digest(asset.content),
    )


def build_manifest(encoded: list[EncodedAsset]) -> dict[str, ManifestEntry]:
    """Map asset path -> {hash, size}."""
    return {item.asset.path: ManifestEntry(hash=item.digest, size=item.size) for item in encoded}


class AssetPublisher:
    """Runs the upload-session protocol for one tenant script.

    `client` must already carry the account's primary bearer credential; it is
    used only to open the session. Uploads authenticate with session tokens.
    """

    def __init__(self, client: httpx.AsyncClient, account_id: str, namespace: str):
        self.client = client
        self.account_id = account_id
        self.namespace = namespace

    def _session_path(self, script_name: str) -> str:
        return (
            f"/accounts/{self.account_id}/workers/dispatch/namespaces/{self.namespace}"
            f"/scripts/{script_name}/assets-upload-session"
        )

    def _upload_path(self) -> str:
        return f"/accounts/{self.account_id}/workers/assets/upload"

    async def publish(self, script_name: str, assets: list[StaticAsset]) -> str:
        """Upload whatever the control plane is missing and return the completion token.

        Args:
            script_name: Script the assets belong to.
            assets: Full static asset set for the script.

        Returns:
            Completion token to reference from the deploy metadata.

        Raises:
            GatewayError: If the session or any upload fails, or the session
                requests a digest that is not in the manifest.
        """
        encoded = [encode_asset(asset) for asset in assets]
        by_digest = {item.digest: item for item in encoded}
        manifest = build_manifest(encoded)

        session = await self.open_session(script_name, manifest)
        logger.info(
            "asset_upload_session_opened",
            script_name=script_name,
            assets=len(manifest),
            buckets=len(session.buckets),
        )

        token = session.jwt
        for bucket in session.buckets:
            if not bucket:
                continue
            token = await self.upload_bucket(bucket, by_digest, token)
        return token

    async def open_session(
        self, script_name: str, manifest: dict[str, ManifestEntry]
    ) -> UploadSession:
        action = "Create assets upload session"
        resp = await send(
            self.client,
            "POST",
            self._session_path(script_name),
            action=action,
            json={"manifest": {path: entry.model_dump() for path, entry in manifest.items()}},
        )
        envelope = parse_envelope(resp, action)
        try:
            return UploadSession.model_validate(envelope.result)
        except ValueError as e:
            raise GatewayError(f"{action} returned no session token", detail=str(e)) from e

    async def upload_bucket(
        self, bucket: list[str], by_digest: dict[str, EncodedAsset], token: str
    ) -> str:
        """Upload one bucket and return the token to carry forward.

        The returned token is the refreshed one from the response, or `token`
        unchanged if the response did not refresh it.
        """
        unknown = [digest for digest in bucket if digest not in by_digest]
        if unknown:
            raise GatewayError(
                "Upload session requested content that is not in the manifest",
                detail=", ".join(unknown),
            )

        files = [
            (
                digest,
                (digest, by_digest[digest].payload, by_digest[digest].asset.content_type),
            )
            for digest in bucket
        ]
        action = "Upload assets"
        resp = await send(
            self.client,
            "POST",
            self._upload_path(),
            action=action,
            params={"base64": "true"},
            headers={"Authorization": f"Bearer {token}"},
            files=files,
        )
        envelope = parse_envelope(resp, action)
        receipt = UploadReceipt.model_validate(envelope.result or {})
        logger.debug("asset_bucket_uploaded", digests=len(bucket), refreshed=bool(receipt.jwt))
        return receipt.jwt or token
