import logging
import os
import re
import secrets
import string
import time
from functools import wraps

import redis
from flask import current_app

# Redis configuration
BLOB_KEY_PREFIX = "blob"
BLOB_KEY_VERSION = "1"
MAX_RETRIES = 3
BASE_BACKOFF = 0.1
IMAGE_CACHE_MAX_AGE = 31536000  # 1 year
DEFAULT_CONTENT_TYPE = "image/jpeg"
SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
SUFFIX_LENGTH = 6

_EXTENSION_RE = re.compile(r"[^a-z0-9]")
_GLOB_SPECIAL_RE = re.compile(r"([*?\[\]\\])")

logger = logging.getLogger(__name__)


def init_app(app):
    """Attach a redis client for image bytes to ``app``.

    Tests (or callers embedding the app) may hand in a ready client through
    ``BLOB_REDIS_CLIENT``; otherwise one is built from ``REDIS_URL``.
    """
    client = app.config.get("BLOB_REDIS_CLIENT")
    if client is None:
        pool = redis.ConnectionPool.from_url(
            app.config["REDIS_URL"],
            max_connections=20,
            socket_timeout=2,
            socket_connect_timeout=2,
            retry_on_timeout=True,
            health_check_interval=30,
        )
        # Raw bytes in, raw bytes out: no decode_responses for image payloads
        client = redis.Redis(connection_pool=pool)
    app.extensions["blob_redis"] = client


def get_client():
    return current_app.extensions["blob_redis"]


def get_blob_key(path, version=BLOB_KEY_VERSION):
    """Generate versioned redis key for a blob path"""
    return f"{BLOB_KEY_PREFIX}:v{version}:{path}"


def retry_with_backoff(func):
    """Retry a blob store call while redis is unreachable.

    Only connection drops are retried; any other redis error means the
    command itself failed and is raised straight away.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        attempt = 0
        while True:
            attempt += 1
            try:
                return func(*args, **kwargs)
            except redis.ConnectionError as e:
                if attempt >= MAX_RETRIES:
                    logger.error(f"Blob store {func.__name__} gave up after {attempt} attempts: {e}")
                    raise
                backoff = BASE_BACKOFF * (2 ** (attempt - 1))
                logger.warning(f"Blob store {func.__name__} lost redis (attempt {attempt}), retrying in {backoff}s")
                time.sleep(backoff)
            except redis.RedisError as e:
                logger.error(f"Blob store {func.__name__} failed: {e}")
                raise
    return wrapper


def escape_glob(value):
    """Escape redis SCAN MATCH metacharacters so ``value`` matches literally."""
    return _GLOB_SPECIAL_RE.sub(r"\\\1", value)


def _random_suffix():
    return "".join(secrets.choice(SUFFIX_ALPHABET) for _ in range(SUFFIX_LENGTH))


def _extension(filename):
    ext = os.path.splitext(filename or "")[1].lstrip(".").lower()
    return _EXTENSION_RE.sub("", ext)


def generate_image_key(room_id, filename):
    """Build ``<room>/<epoch ms>-<random>.<ext>`` for an uploaded file.

    Uniqueness is best effort: the millisecond stamp plus six random
    characters make collisions unlikely but not impossible.
    """
    stem = f"{int(time.time() * 1000)}-{_random_suffix()}"
    ext = _extension(filename)
    if ext:
        stem = f"{stem}.{ext}"
    return f"{room_id}/{stem}"


@retry_with_backoff
def put_blob(path, data, content_type):
    get_client().hset(
        get_blob_key(path),
        mapping={"data": data, "content_type": content_type or ""},
    )
    logger.info(f"Stored blob {path} ({len(data)} bytes)")


@retry_with_backoff
def get_blob(path):
    """Return ``(bytes, content_type)`` for ``path`` or None when absent."""
    stored = get_client().hgetall(get_blob_key(path))
    if not stored or b"data" not in stored:
        return None
    content_type = stored.get(b"content_type", b"").decode("utf-8")
    return stored[b"data"], content_type or DEFAULT_CONTENT_TYPE


@retry_with_backoff
def delete_room_blobs(room_id):
    """Drop every blob stored under a room's prefix"""
    client = get_client()
    pattern = get_blob_key(f"{escape_glob(room_id)}/*")
    keys = list(client.scan_iter(match=pattern))
    if keys:
        client.delete(*keys)
        logger.info(f"Deleted {len(keys)} blobs for room {room_id}")
    return len(keys)


def check_redis_connection():
    """Ping the image store, used by /health"""
    try:
        return bool(ping_blob_store())
    except redis.RedisError as e:
        logger.error(f"Image store unavailable: {e}")
        return False


@retry_with_backoff
def ping_blob_store():
    return get_client().ping()
