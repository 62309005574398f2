"""
Shared HTTP session for soil provider calls, with optional response caching
through requests-cache.

Caching is off by default: every analysis re-fetches from the provider. Set
CACHE_BACKEND=sqlite or CACHE_BACKEND=mongodb to reuse property responses
across requests. Cache keys ignore the Authorization header because the
bearer token changes on every login, and round coordinates to 4 decimal
places so nearby points share an entry. Requests themselves always carry the
caller's coordinates.
"""

import copy
import os
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import requests
from pymongo import MongoClient
from requests.adapters import HTTPAdapter
from requests_cache import CachedSession, create_key

from soil_analyzer.logging_config import get_logger

logger = get_logger(__name__)

# urllib3 keeps 10 connections per host unless told otherwise
DEFAULT_POOL_MAXSIZE = 10
UNBOUNDED_POOL_MAXSIZE = 64

# Module-level singleton (tests can override/reset)
_SESSION: requests.Session | None = None
_POOL_MAXSIZE = DEFAULT_POOL_MAXSIZE


def canonicalize_coords(params: dict[str, Any]) -> dict[str, Any]:
    """Round coordinate parameters to 4 decimal places for stable cache keys."""
    if not params:
        return params

    canonical: dict[str, Any] = {}
    for key, value in params.items():
        if key.lower() in {"lat", "latitude", "lon", "lng", "longitude"}:
            try:
                canonical[key] = round(float(value), 4)
            except (ValueError, TypeError):
                canonical[key] = value
        else:
            canonical[key] = value

    return canonical


def _key_with_rounded_coords(request, **kwargs):
    """Cache key of ``request`` with its coordinate parameters rounded."""
    parts = urlsplit(request.url)
    params = canonicalize_coords(dict(parse_qsl(parts.query, keep_blank_values=True)))

    keyed = copy.copy(request)
    keyed.url = urlunsplit(parts._replace(query=urlencode(params)))
    return create_key(request=keyed, **kwargs)


def pool_size_for(max_concurrency: int | None) -> int:
    """Connection pool size that lets ``max_concurrency`` calls reuse sockets."""
    if max_concurrency is None:
        return UNBOUNDED_POOL_MAXSIZE
    return max(DEFAULT_POOL_MAXSIZE, max_concurrency)


def _mount_pool(session: requests.Session, pool_maxsize: int) -> None:
    adapter = HTTPAdapter(pool_connections=DEFAULT_POOL_MAXSIZE, pool_maxsize=pool_maxsize)
    session.mount("https://", adapter)
    session.mount("http://", adapter)


def _cache_ok(response) -> bool:
    if response.status_code != 200:
        return False
    try:
        payload = response.json()
    except ValueError:
        return False
    return isinstance(payload, dict) and "property" in payload


def _sqlite_session(cache_name: str, expire_after: int) -> CachedSession:
    """Create SQLite-backed cached session."""
    logger.info(f"Using SQLite cache backend: {cache_name}")
    return CachedSession(
        cache_name=cache_name,
        backend="sqlite",
        key_fn=_key_with_rounded_coords,
        match_headers=False,
        allowable_codes=(200,),
        allowable_methods=("GET",),
        expire_after=expire_after,
        filter_fn=_cache_ok,
    )


def _mongo_session(
    uri: str,
    collection_name: str,
    expire_after: int,
    timeout_ms: int = 5000,
) -> CachedSession:
    """Create MongoDB-backed cached session."""
    logger.debug(f"Attempting MongoDB connection to {uri}")
    client: MongoClient = MongoClient(uri, serverSelectionTimeoutMS=timeout_ms)
    client.admin.command("ping")  # Fail fast if unreachable
    logger.info(f"Using MongoDB cache backend: {collection_name}")
    return CachedSession(
        cache_name=collection_name,
        backend="mongodb",
        connection=client,
        key_fn=_key_with_rounded_coords,
        match_headers=False,
        allowable_codes=(200,),
        allowable_methods=("GET",),
        expire_after=expire_after,
        filter_fn=_cache_ok,
    )


def _make_session() -> requests.Session:
    """Create a new session with current environment settings."""
    backend = os.getenv("CACHE_BACKEND", "none").lower()
    cache_name = os.getenv("CACHE_NAME", "cache/soil_http")
    expire_after = int(os.getenv("CACHE_EXPIRE_S", "3600"))

    if backend in {"", "none", "off"}:
        logger.debug("HTTP response caching disabled")
        return requests.Session()

    if backend == "mongodb":
        try:
            uri = os.environ["MONGO_URI"]
            collection_name = os.getenv("MONGO_COLL", "soil_http")
            return _mongo_session(uri, collection_name, expire_after)
        except KeyError:
            logger.warning(
                "MongoDB backend requested but MONGO_URI not set, falling back to SQLite"
            )
        except Exception as e:
            logger.warning(f"MongoDB connection failed, falling back to SQLite: {e}")

    return _sqlite_session(cache_name, expire_after)


def get_session(pool_maxsize: int | None = None) -> requests.Session:
    """
    Get the process-wide HTTP session.

    Args:
        pool_maxsize: Connections to keep per host. The pool only grows;
            a smaller request keeps the current size.

    Environment variables:
    - CACHE_BACKEND: 'none' (default), 'sqlite' or 'mongodb'
    - CACHE_NAME: SQLite cache file name (default: 'cache/soil_http')
    - CACHE_EXPIRE_S: Cache lifetime in seconds (default: 3600)
    - For MongoDB: MONGO_URI (required), MONGO_COLL (default: 'soil_http')

    MongoDB falls back to SQLite if the connection fails.
    """
    global _SESSION, _POOL_MAXSIZE
    if _SESSION is None:
        _SESSION = _make_session()
        _POOL_MAXSIZE = DEFAULT_POOL_MAXSIZE

    if pool_maxsize is not None and pool_maxsize > _POOL_MAXSIZE:
        logger.debug(f"Resizing HTTP connection pool to {pool_maxsize}")
        _mount_pool(_SESSION, pool_maxsize)
        _POOL_MAXSIZE = pool_maxsize

    return _SESSION


def reset_session() -> None:
    """Close and clear the module session (for tests)."""
    global _SESSION, _POOL_MAXSIZE
    if _SESSION is not None:
        _SESSION.close()
    _SESSION = None
    _POOL_MAXSIZE = DEFAULT_POOL_MAXSIZE


def set_session_for_tests(session: requests.Session) -> None:
    """Force get_session() to return a provided session (for tests)."""
    global _SESSION, _POOL_MAXSIZE
    _SESSION = session
    _POOL_MAXSIZE = DEFAULT_POOL_MAXSIZE
