"""
Archive Fetcher - Single-attempt byte download with a size ceiling
"""

from __future__ import annotations

import asyncio
import logging

import aiohttp

from pkgdiff.services.errors import ArchiveTooLarge, FetchFailed

logger = logging.getLogger(__name__)

READ_CHUNK = 64 * 1024


async def fetch_bytes(
    url: str,
    timeout_seconds: float = 30,
    max_size: int | None = None,
    session: aiohttp.ClientSession | None = None,
) -> bytes:
    """Download ``url`` and return its body.

    Raises FetchFailed on a non-200 status or a transport error, and
    ArchiveTooLarge as soon as the declared or streamed size passes
    ``max_size``. No retries happen here.
    """
    if session is None:
        timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        async with aiohttp.ClientSession(timeout=timeout) as own_session:
            return await _download(own_session, url, max_size)
    return await _download(session, url, max_size)


async def _download(session: aiohttp.ClientSession, url: str, max_size: int | None) -> bytes:
    logger.info("Fetching %s", url)
    try:
        async with session.get(url) as response:
            if response.status != 200:
                raise FetchFailed(url, status=response.status, reason=response.reason)

            declared = response.content_length
            if max_size is not None and declared is not None and declared > max_size:
                raise ArchiveTooLarge(declared, max_size)

            body = bytearray()
            async for chunk in response.content.iter_chunked(READ_CHUNK):
                body += chunk
                if max_size is not None and len(body) > max_size:
                    raise ArchiveTooLarge(len(body), max_size)
            return bytes(body)
    except asyncio.TimeoutError as e:
        raise FetchFailed(url, reason="request timed out") from e
    except aiohttp.ClientError as e:
        raise FetchFailed(url, reason=str(e) or type(e).__name__) from e


async def fetch_json(
    url: str,
    params: dict[str, str] | None = None,
    timeout_seconds: float = 30,
) -> tuple[int, object]:
    """GET a JSON document; returns (status, payload) with payload None on non-200"""
    timeout = aiohttp.ClientTimeout(total=timeout_seconds)
    try:
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(url, params=params, headers={"Accept": "application/json"}) as response:
                if response.status != 200:
                    return response.status, None
                return response.status, await response.json(content_type=None)
    except asyncio.TimeoutError as e:
        raise FetchFailed(url, reason="request timed out") from e
    except (aiohttp.ClientError, ValueError) as e:
        raise FetchFailed(url, reason=str(e) or type(e).__name__) from e
