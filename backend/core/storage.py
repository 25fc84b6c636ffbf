"""
Supabase Storage service for uploaded images and logos.

Files are stored under ``{path}/{epoch_ms}_{random}.{ext}`` and referenced
from the database by their public URL.
"""
import logging
import mimetypes
import random
import string
import time

from django.conf import settings

from .exceptions import StorageError

logger = logging.getLogger(__name__)

_client = None
_client_config = None


def get_supabase_client():
    """Service role client, created on first use and rebuilt when settings change"""
    global _client, _client_config

    url = getattr(settings, 'SUPABASE_URL', '')
    key = getattr(settings, 'SUPABASE_SERVICE_ROLE_KEY', '')
    if not url or not key:
        raise StorageError('Missing SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY in environment variables')

    if _client is None or _client_config != (url, key):
        from supabase import create_client
        _client = create_client(url, key)
        _client_config = (url, key)
    return _client


def default_bucket():
    return getattr(settings, 'SUPABASE_BUCKET_NAME', 'knowledge') or 'knowledge'


def product_bucket():
    return getattr(settings, 'SUPABASE_PRODUCT_BUCKET_NAME', None) or default_bucket()


def announcement_bucket():
    return getattr(settings, 'SUPABASE_ANNOUNCEMENT_BUCKET_NAME', None) or default_bucket()


def _random_suffix(length=13):
    alphabet = string.ascii_lowercase + string.digits
    return ''.join(random.choices(alphabet, k=length))


def build_storage_path(path, filename):
    """``{path}/{epoch_ms}_{random13}.{ext}`` for an uploaded file name"""
    extension = filename.rsplit('.', 1)[-1] if filename and '.' in filename else 'bin'
    timestamp = int(time.time() * 1000)
    return f"{path.strip('/')}/{timestamp}_{_random_suffix()}.{extension}"


def upload_file(file, path, bucket=None):
    """
    Upload a Django ``UploadedFile`` and return its public URL.

    Raises StorageError if the storage service rejects the upload.
    """
    bucket = bucket or default_bucket()
    full_path = build_storage_path(path, getattr(file, 'name', ''))
    content_type = (
        getattr(file, 'content_type', None)
        or mimetypes.guess_type(getattr(file, 'name', ''))[0]
        or 'application/octet-stream'
    )

    client = get_supabase_client()
    try:
        file.seek(0)
        client.storage.from_(bucket).upload(
            path=full_path,
            file=file.read(),
            file_options={
                'cache-control': '3600',
                'upsert': 'false',
                'content-type': content_type,
            },
        )
        public_url = client.storage.from_(bucket).get_public_url(full_path)
    except Exception as e:
        logger.error(f"Upload of {full_path} to bucket {bucket} failed: {e}")
        raise StorageError(f"Failed to upload file: {e}") from e

    logger.info(f"Uploaded {full_path} to bucket {bucket}")
    return public_url.rstrip('?') if isinstance(public_url, str) else public_url


def extract_path_from_public_url(public_url, bucket=None):
    """Storage path of a public URL, or None if it points elsewhere"""
    bucket = bucket or default_bucket()
    base_url = (getattr(settings, 'SUPABASE_URL', '') or '').rstrip('/')
    public_base = f"{base_url}/storage/v1/object/public/"
    if not base_url or not public_url.startswith(public_base):
        return None
    remainder = public_url[len(public_base):].split('?', 1)[0]
    url_bucket, _, path = remainder.partition('/')
    if url_bucket != bucket or not path:
        return None
    return path


def delete_file(path_or_url, bucket=None):
    """Remove one object. Returns False instead of raising on any failure."""
    bucket = bucket or default_bucket()
    if not path_or_url:
        return False

    if path_or_url.startswith('http'):
        path = extract_path_from_public_url(path_or_url, bucket)
    else:
        path = path_or_url
    if not path:
        logger.warning(f"Invalid storage path or URL for bucket {bucket}: {path_or_url}")
        return False

    try:
        client = get_supabase_client()
        client.storage.from_(bucket).remove([path])
    except Exception as e:
        logger.error(f"Delete of {path} from bucket {bucket} failed: {e}")
        return False
    return True


def delete_files(urls, bucket=None):
    """Best-effort removal of several objects; returns how many were removed"""
    deleted = 0
    for url in urls or []:
        if url and delete_file(url, bucket):
            deleted += 1
    return deleted


def indexed_files(files, prefix):
    """
    ``{prefix}_0``, ``{prefix}_1``, ... from a multipart upload, stopping at
    the first missing index. Empty files are skipped.
    """
    collected = []
    index = 0
    while f"{prefix}_{index}" in files:
        upload = files[f"{prefix}_{index}"]
        if upload.size:
            collected.append(upload)
        index += 1
    return collected
