"""Clients for external services."""

from .assets import AssetPublisher, StaticAsset, build_manifest, content_digest, encode_asset
from .platform import PlatformGateway

__all__ = [
    "AssetPublisher",
    "PlatformGateway",
    "StaticAsset",
    "build_manifest",
    "content_digest",
    "encode_asset",
]
