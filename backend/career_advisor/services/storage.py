import os
from pathlib import Path
import re
from uuid import uuid4

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from career_advisor.core.config import settings

CERTIFICATE_PREFIX = "certificates"
UNSAFE_PATH_CHARS = re.compile(r"[^A-Za-z0-9@._-]")


def _s3_object_url(bucket: str, key: str, region: str | None) -> str:
    if not region or region == "us-east-1":
        return f"https://{bucket}.s3.amazonaws.com/{key}"
    return f"https://{bucket}.s3.{region}.amazonaws.com/{key}"


def s3_is_enabled() -> bool:
    return bool(settings.s3_bucket)


def _create_s3_client():
    kwargs: dict = {}
    if settings.s3_region:
        kwargs["region_name"] = settings.s3_region
    if settings.s3_endpoint_url:
        kwargs["endpoint_url"] = settings.s3_endpoint_url
    if settings.aws_access_key_id and settings.aws_secret_access_key:
        kwargs["aws_access_key_id"] = settings.aws_access_key_id
        kwargs["aws_secret_access_key"] = settings.aws_secret_access_key
        if settings.aws_session_token:
            kwargs["aws_session_token"] = settings.aws_session_token
    return boto3.client("s3", **kwargs)


def _safe_segment(value: str) -> str:
    return UNSAFE_PATH_CHARS.sub("_", value) or "unknown"


def _object_name(filename: str | None) -> str:
    safe_name = os.path.basename(filename or "certificate").replace(" ", "_")
    return f"{uuid4().hex}_{_safe_segment(safe_name)}"


def _upload_to_s3(owner: str, name: str, content_type: str | None, content: bytes) -> dict:
    key = f"{CERTIFICATE_PREFIX}/{owner}/{name}"
    client = _create_s3_client()
    try:
        client.put_object(
            Bucket=settings.s3_bucket,
            Key=key,
            Body=content,
            ContentType=content_type or "application/octet-stream",
        )
    except (BotoCoreError, ClientError) as exc:
        raise RuntimeError(f"Unable to upload object to S3: {exc}") from exc
    return {
        "file_url": _s3_object_url(settings.s3_bucket, key, settings.s3_region),
        "key": key,
        "backend": "s3",
    }


def _write_local(owner: str, name: str, content: bytes) -> dict:
    base_dir = Path(settings.local_upload_dir) / CERTIFICATE_PREFIX / owner
    base_dir.mkdir(parents=True, exist_ok=True)
    file_path = base_dir / name
    with file_path.open("wb") as buffer:
        buffer.write(content)
    return {
        "file_url": f"/uploads/{CERTIFICATE_PREFIX}/{owner}/{name}",
        "key": str(file_path),
        "backend": "local",
    }


def store_certificate_file(
    email: str,
    filename: str | None,
    content_type: str | None,
    content: bytes,
) -> dict:
    """Land an uploaded certificate in S3 or the local upload directory.

    The bytes are kept as-is; nothing downstream reads them.
    """
    owner = _safe_segment(email)
    name = _object_name(filename)
    if s3_is_enabled():
        return _upload_to_s3(owner, name, content_type, content)
    return _write_local(owner, name, content)


def delete_certificate_file(stored: dict) -> None:
    """Remove a file written by ``store_certificate_file``."""
    if stored.get("backend") == "s3":
        client = _create_s3_client()
        try:
            client.delete_object(Bucket=settings.s3_bucket, Key=stored["key"])
        except (BotoCoreError, ClientError) as exc:
            raise RuntimeError(f"Unable to delete object from S3: {exc}") from exc
        return
    Path(stored["key"]).unlink(missing_ok=True)
