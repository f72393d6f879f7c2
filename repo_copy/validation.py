from __future__ import annotations

import logging
from typing import Optional

import httpx

from .remote import RemoteSpec
from .workspace import NotFoundError

DEFAULT_TIMEOUT = 30.0


def build_http_client(timeout: float = DEFAULT_TIMEOUT) -> httpx.Client:
    return httpx.Client(timeout=timeout, follow_redirects=True)


def validate_request(
    remote: RemoteSpec,
    repo: str,
    directory: str,
    *,
    client: Optional[httpx.Client] = None,
) -> str:
    """Check that ``directory`` exists in ``repo`` at the head of the branch.

    Returns the probed URL. Raises NotFoundError on a non-2xx response or a
    transport failure.
    """
    url = remote.head_url(repo, directory)
    owns_client = client is None
    http = client or build_http_client()
    logging.debug("HEAD %s", url)
    try:
        response = http.head(url)
    except httpx.HTTPError as exc:
        logging.error("Failed to reach %s", url)
        raise NotFoundError(f"HEAD {url} failed: {exc}") from exc
    finally:
        if owns_client:
            http.close()

    if not response.is_success:
        logging.error("Failed to find %s", url)
        raise NotFoundError(
            f"HEAD {url} returned {response.status_code} ({response.reason_phrase})"
        )
    logging.info("Found %s", url)
    return url
