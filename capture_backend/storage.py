"""
Storage abstraction for S3-compatible object storage and in-memory testing.

Capture photos are public objects: once uploaded, the record stores the
object's public URL rather than a signed one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol
from urllib.parse import quote

import boto3
from botocore.config import Config


class StorageClient(Protocol):
    """Defines the operations the API needs from object storage."""

    def upload_bytes(
        self, name: str, data: bytes, content_type: str = "application/octet-stream"
    ) -> None:
        ...

    def public_url(self, name: str) -> str:
        ...

    def delete(self, name: str) -> None:
        ...

    def get_bytes(self, name: str) -> bytes:
        ...


@dataclass
class InMemoryStorageClient:
    """Test double for storage interactions."""

    base_url: str = "https://example.test/storage/capture-photos"
    stored_objects: dict = None

    def __post_init__(self):
        if self.stored_objects is None:
            self.stored_objects = {}

    def upload_bytes(
        self, name: str, data: bytes, content_type: str = "application/octet-stream"
    ) -> None:
        self.stored_objects[name] = bytes(data)

    def public_url(self, name: str) -> str:
        return f"{self.base_url}/{quote(name)}"

    def delete(self, name: str) -> None:
        self.stored_objects.pop(name, None)

    def get_bytes(self, name: str) -> bytes:
        stored = self.stored_objects.get(name)
        if stored is None:
            raise FileNotFoundError(name)
        return stored


@dataclass
class S3StorageClient:
    """
    S3-compatible storage client for the public capture photo bucket.
    """

    bucket: str
    region: str
    endpoint: str
    access_key_id: str
    secret_access_key: str
    public_base_url: Optional[str] = None

    def __post_init__(self):
        config = Config(
            s3={"addressing_style": "virtual"},
            signature_version="s3v4",
        )
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint or None,
            region_name=self.region or None,
            aws_access_key_id=self.access_key_id or None,
            aws_secret_access_key=self.secret_access_key or None,
            config=config,
        )

    def upload_bytes(
        self, name: str, data: bytes, content_type: str = "application/octet-stream"
    ) -> None:
        self._client.put_object(
            Bucket=self.bucket,
            Key=name,
            Body=data,
            ContentType=content_type,
        )

    def public_url(self, name: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{quote(name)}"
        if self.endpoint:
            return f"{self.endpoint.rstrip('/')}/{self.bucket}/{quote(name)}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{quote(name)}"

    def delete(self, name: str) -> None:
        self._client.delete_object(Bucket=self.bucket, Key=name)

    def get_bytes(self, name: str) -> bytes:
        response = self._client.get_object(Bucket=self.bucket, Key=name)
        return response["Body"].read()
