"""HTTP session helpers.

Outbound calls (remote table fetch, mail relay) go through a pooled
``requests.Session`` with a urllib3 retry adapter. Only idempotent
methods are retried; a POST to the mail provider is attempted once.
"""

from typing import List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry as URLRetry

DEFAULT_TIMEOUT = 30


class RetryStrategy:
    """Defines retry behavior for HTTP requests."""

    def __init__(self, max_retries: int = 3, backoff_factor: float = 0.5,
                 status_forcelist: Optional[List[int]] = None):
        """Initialize retry strategy.

        Args:
            max_retries: Maximum number of retry attempts (default: 3)
            backoff_factor: Exponential backoff multiplier (default: 0.5)
            status_forcelist: HTTP status codes to retry on
                            (default: [429, 500, 502, 503, 504])
        """
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor
        self.status_forcelist = status_forcelist or [429, 500, 502, 503, 504]

    def get_retry_object(self) -> URLRetry:
        return URLRetry(
            total=self.max_retries,
            backoff_factor=self.backoff_factor,
            status_forcelist=self.status_forcelist,
            allowed_methods=["GET", "HEAD"],
            raise_on_status=False,
        )


def build_session(retry_strategy: Optional[RetryStrategy] = None,
                  pool_maxsize: int = 10) -> requests.Session:
    """Return a session with the retry adapter mounted for http and https."""
    session = requests.Session()
    adapter = HTTPAdapter(
        max_retries=(retry_strategy or RetryStrategy()).get_retry_object(),
        pool_maxsize=pool_maxsize,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session
