"""Helpers for persisting uploaded report PDFs."""

from __future__ import annotations

import io
import os
import re
from typing import Optional
from uuid import uuid4

from minio import Minio
from minio.error import S3Error

from .errors import InvalidRequest, StorageError
from .logging_config import get_logger

# purpose: centralize report file reads, writes, and removals for upload routes
# status: active

PDF_CONTENT_TYPE = "application/pdf"
MAX_REPORT_BYTES = 10 * 1024 * 1024
MAX_UPDATE_REPORT_BYTES = 50 * 1024 * 1024

logger = get_logger(__name__)

_MINIO_CLIENT: Optional[Minio] = None


def _get_upload_dir() -> str:
    """Return the configured upload directory, creating it when needed."""

    upload_dir = os.getenv("UPLOAD_DIR", "uploaded_files")
    os.makedirs(upload_dir, exist_ok=True)
    return upload_dir


def _bucket() -> str:
    return os.getenv("MINIO_BUCKET", "uploads")


def _ensure_minio_client() -> Optional[Minio]:
    """Initialize and return a MinIO client when configuration is present."""

    global _MINIO_CLIENT
    endpoint = os.getenv("MINIO_ENDPOINT", "").strip()
    access_key = os.getenv("MINIO_ACCESS_KEY")
    secret_key = os.getenv("MINIO_SECRET_KEY")
    if not endpoint or not access_key or not secret_key:
        return None
    if _MINIO_CLIENT is None:
        client = Minio(
            endpoint,
            access_key=access_key,
            secret_key=secret_key,
            secure=endpoint.startswith("https"),
        )
        try:
            if not client.bucket_exists(_bucket()):
                client.make_bucket(_bucket())
        except S3Error as exc:
            raise StorageError(f"object storage unavailable: {exc}") from exc
        _MINIO_CLIENT = client
    return _MINIO_CLIENT


def _build_object_name(namespace: str | None, filename: str) -> str:
    """Construct a normalized storage object key within an optional namespace."""

    safe_name = re.sub(r"[^A-Za-z0-9_.-]", "_", os.path.basename(filename or "")) or "report.pdf"
    if not namespace:
        return f"{uuid4()}_{safe_name}"
    clean_namespace = re.sub(r"[^A-Za-z0-9/_.-]", "_", namespace).strip("/")
    return f"{clean_namespace}/{uuid4()}_{safe_name}"


def ensure_pdf(content_type: str | None, data: bytes, *, max_bytes: int = MAX_REPORT_BYTES) -> None:
    """Reject anything that is not a PDF within the size limit."""

    if content_type != PDF_CONTENT_TYPE:
        raise InvalidRequest("Only PDF files are allowed", content_type=content_type)
    if len(data) > max_bytes:
        raise InvalidRequest(
            f"File size must be less than {max_bytes // (1024 * 1024)}MB",
            size=len(data),
        )


def save_binary_payload(
    data: bytes,
    filename: str,
    *,
    content_type: str = "application/octet-stream",
    namespace: str | None = None,
) -> tuple[str, int]:
    """Persist binary data using configured storage backend."""

    object_name = _build_object_name(namespace, filename)
    client = _ensure_minio_client()
    if client:
        try:
            client.put_object(
                _bucket(),
                object_name,
                io.BytesIO(data),
                length=len(data),
                content_type=content_type,
            )
        except S3Error as exc:
            raise StorageError(f"could not store {filename}: {exc}") from exc
        storage_path = f"s3://{_bucket()}/{object_name}"
    else:
        upload_dir = _get_upload_dir()
        if namespace:
            target_dir = os.path.join(upload_dir, *namespace.strip("/").split("/"))
            os.makedirs(target_dir, exist_ok=True)
        else:
            target_dir = upload_dir
        storage_path = os.path.join(target_dir, os.path.basename(object_name))
        with open(storage_path, "wb") as handle:
            handle.write(data)
    logger.info("report_file_saved", storage_path=storage_path, size=len(data))
    return storage_path, len(data)


def _split_s3_path(storage_path: str) -> tuple[str, str]:
    _, _, bucket, *key_parts = storage_path.split("/", 3)
    if not key_parts or not key_parts[0]:
        raise FileNotFoundError("Invalid s3 storage path")
    return bucket, key_parts[0]


def load_binary_payload(storage_path: str) -> bytes:
    """Retrieve stored bytes regardless of backend."""

    if storage_path.startswith("s3://"):
        client = _ensure_minio_client()
        if not client:
            raise FileNotFoundError("Object storage client unavailable for s3 path")
        bucket, object_name = _split_s3_path(storage_path)
        response = client.get_object(bucket, object_name)
        try:
            return response.read()
        finally:
            response.close()
            response.release_conn()

    with open(storage_path, "rb") as handle:
        return handle.read()


def delete_binary_payload(storage_path: str | None) -> bool:
    """Remove a stored file; missing files are not an error."""

    if not storage_path:
        return False
    if storage_path.startswith("s3://"):
        client = _ensure_minio_client()
        if not client:
            return False
        bucket, object_name = _split_s3_path(storage_path)
        client.remove_object(bucket, object_name)
        logger.info("report_file_removed", storage_path=storage_path)
        return True
    if not os.path.exists(storage_path):
        return False
    os.remove(storage_path)
    logger.info("report_file_removed", storage_path=storage_path)
    return True
