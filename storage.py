# storage.py - Azure Blob Storage access for watermarked card images
import logging
import datetime
from typing import Optional
from azure.storage.blob import BlobServiceClient, ContainerClient, ContentSettings
import config
from config import LOCAL_TZ

logger = logging.getLogger("reprint-storage")


class StorageNotConfigured(RuntimeError):
    pass


class ReprintBlobStore:
    """Thin wrapper around one blob container."""

    def __init__(self, container_client: ContainerClient):
        self.container = container_client

    @classmethod
    def from_env(cls, connection_string: Optional[str] = None, container_name: Optional[str] = None):
        connection_string = connection_string or config.STORAGE_CONNECTION_STRING
        if not connection_string:
            raise StorageNotConfigured("ReprintStorageConnectionString missing")
        service = BlobServiceClient.from_connection_string(connection_string)
        return cls(service.get_container_client(container_name or config.CONTAINER_NAME))

    @property
    def name(self) -> str:
        return self.container.container_name

    def ensure_container(self):
        if not self.container.exists():
            logger.info("Creating blob container %s", self.name)
            self.container.create_container()

    def upload_image(self, request_id: str, data: bytes, now: Optional[datetime.datetime] = None) -> str:
        """Upload one JPEG as <yyyy>/<mm>/<request_id>.jpg; returns '<container>/<blob name>'."""
        now = now or datetime.datetime.now(datetime.timezone.utc)
        # same calendar as the date in the request ID
        local = now.astimezone(LOCAL_TZ)
        blob_name = f"{local:%Y}/{local:%m}/{request_id}.jpg"
        self.ensure_container()
        self.container.upload_blob(
            name=blob_name,
            data=data,
            overwrite=False,
            content_settings=ContentSettings(content_type="image/jpeg"),
        )
        logger.info("Uploaded %d bytes to %s/%s", len(data), self.name, blob_name)
        return f"{self.name}/{blob_name}"

    def check(self) -> Optional[str]:
        """Make sure the container is reachable; returns its ETag."""
        self.ensure_container()
        props = self.container.get_container_properties()
        return props.etag or None
