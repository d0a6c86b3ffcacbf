"""S3 storage service for recipe images."""

import asyncio
import logging
import mimetypes
import time
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from swipechef.config import get_settings
from swipechef.errors import StorageError

logger = logging.getLogger(__name__)

LOCAL_URI_PREFIX = "file://"


def is_local_uri(uri: Optional[str]) -> bool:
    """True for an image picked on the device that hasn't been uploaded yet."""
    return bool(uri) and uri.startswith(LOCAL_URI_PREFIX)


class StorageService:
    """
    Handles uploading and deleting recipe images in S3.

    Images are stored with the pattern:
    recipe-images/{user_id}/{recipe_key}_{timestamp_ms}.{ext}
    """

    def __init__(self):
        self._client = None

    @property
    def client(self):
        """Lazy-load S3 client."""
        if self._client is None:
            settings = get_settings()
            if settings.s3_enabled:
                self._client = boto3.client(
                    "s3",
                    aws_access_key_id=settings.aws_access_key_id,
                    aws_secret_access_key=settings.aws_secret_access_key,
                    region_name=settings.aws_region,
                )
        return self._client

    @property
    def bucket_name(self) -> Optional[str]:
        """Get bucket name from settings."""
        return get_settings().s3_bucket_name

    @property
    def is_enabled(self) -> bool:
        """Check if S3 storage is enabled."""
        return get_settings().s3_enabled

    @property
    def prefix(self) -> str:
        return get_settings().recipe_image_prefix

    def public_url(self, key: str) -> str:
        settings = get_settings()
        return f"https://{self.bucket_name}.s3.{settings.aws_region}.amazonaws.com/{key}"

    def key_from_url(self, image_url: str) -> Optional[str]:
        """Object key of a URL we produced, or None for foreign URLs."""
        marker = f"/{self.prefix}/"
        if marker not in image_url:
            return None
        return f"{self.prefix}/{image_url.split(marker, 1)[1]}"

    async def upload_recipe_image(self, uri: str, recipe_key: str, user_id: str) -> str:
        """
        Upload a local image and return its public URL.

        Args:
            uri: file:// URI of the picked image
            recipe_key: recipe id, or a temporary key for recipes not saved yet
            user_id: owner; images live under a per-user folder

        Raises:
            StorageError if the file can't be read or the upload fails
        """
        if not self.is_enabled:
            raise StorageError("Image storage is not configured")

        path = Path(unquote(urlparse(uri).path))
        try:
            body = await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise StorageError(f"Could not read image {path.name}: {e}") from e

        extension = path.suffix.lstrip(".").lower() or "jpg"
        content_type = mimetypes.types_map.get(f".{extension}", "image/jpeg")
        key = f"{self.prefix}/{user_id}/{recipe_key}_{int(time.time() * 1000)}.{extension}"

        logger.info("Uploading recipe image to S3: %s", key)
        try:
            await asyncio.to_thread(
                self.client.put_object,
                Bucket=self.bucket_name,
                Key=key,
                Body=body,
                ContentType=content_type,
                # Note: Public access is controlled by bucket policy, not ACL
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to upload image: {e}") from e

        return self.public_url(key)

    async def delete_recipe_image(self, image_url: str) -> bool:
        """
        Delete an image previously returned by upload_recipe_image.

        Returns:
            True if deleted, False otherwise (never raises)
        """
        if not self.is_enabled:
            return False

        key = self.key_from_url(image_url)
        if key is None:
            return False

        try:
            await asyncio.to_thread(
                self.client.delete_object,
                Bucket=self.bucket_name,
                Key=key,
            )
        except (ClientError, BotoCoreError) as e:
            logger.warning("Failed to delete image %s: %s", key, e)
            return False

        logger.info("Recipe image deleted: %s", key)
        return True


# Singleton instance
storage_service = StorageService()
