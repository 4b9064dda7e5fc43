"""Note files in Supabase Storage.

Roles: faculty upload, every authenticated user downloads, administrators
remove.
"""

from __future__ import annotations

import mimetypes
import os
from typing import Any, Callable, Optional, TypeVar

from postgrest.exceptions import APIError

from .common import SupabaseOperationError, _get_client, _handle_api_error

T = TypeVar("T")


def _object_path(storage_path: str) -> str:
    path = (storage_path or "").strip().lstrip("/")
    if not path:
        raise SupabaseOperationError("Storage path not provided.")
    return path


def _bucket_api(url: str, key: str, bucket: str, action: str):
    if not (bucket or "").strip():
        raise SupabaseOperationError(f"Storage bucket not provided for {action}.")
    return _get_client(url, key).storage.from_(bucket)


def _run(action: str, bucket: str, call: Callable[[], T]) -> T:
    try:
        return call()
    except APIError as err:
        raise _handle_api_error(err) from err
    except Exception as exc:
        raise SupabaseOperationError(f"Storage {action} failed in bucket '{bucket}': {exc}") from exc


def _stored_path(response: Any, requested: str) -> str:
    """The SDK answers with a dict on older releases and an object on newer ones."""

    if isinstance(response, dict):
        return response.get("path") or response.get("Key") or requested
    return getattr(response, "path", None) or requested


def _payload_bytes(response: Any) -> bytes:
    if isinstance(response, bytes):
        return response
    for attr in ("data", "content"):
        value = getattr(response, attr, None)
        if isinstance(value, bytes):
            return value
    raise SupabaseOperationError("Unexpected response while downloading a stored file.")


def upload_file_to_bucket(
    url: str,
    key: str,
    *,
    bucket: str,
    file_path: str,
    storage_path: str,
    content_type: Optional[str] = None,
    upsert: bool = False,
) -> str:
    """Store a local file at ``storage_path`` and return the path the bucket reports."""

    path = _object_path(storage_path)
    if not file_path or not os.path.isfile(file_path):
        raise SupabaseOperationError(f"File to upload does not exist: {file_path}")

    api = _bucket_api(url, key, bucket, "upload")
    options = {
        "upsert": "true" if upsert else "false",
        "content-type": content_type
        or mimetypes.guess_type(file_path)[0]
        or "application/octet-stream",
    }

    def _upload():
        with open(file_path, "rb") as fh:
            return api.upload(path=path, file=fh.read(), file_options=options)

    return _stored_path(_run("upload", bucket, _upload), path)


def download_file_from_bucket(url: str, key: str, *, bucket: str, storage_path: str) -> bytes:
    path = _object_path(storage_path)
    api = _bucket_api(url, key, bucket, "download")
    return _payload_bytes(_run("download", bucket, lambda: api.download(path)))


def delete_file_from_bucket(url: str, key: str, *, bucket: str, storage_path: str) -> None:
    path = _object_path(storage_path)
    api = _bucket_api(url, key, bucket, "removal")
    _run("removal", bucket, lambda: api.remove([path]))


__all__ = ["upload_file_to_bucket", "download_file_from_bucket", "delete_file_from_bucket"]
