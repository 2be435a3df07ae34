from __future__ import annotations

from typing import Any, Dict, Optional
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry


class RequestsTransport:
    """Requests session wrapper with transport-level retry/backoff.

    Retries on connection errors and on the listed status codes. Once retries
    are exhausted the last response is returned as-is (raise_on_status=False)
    so callers can still inspect e.g. a 429. Every call is bounded by
    `timeout` seconds unless a per-call timeout is given.
    """

    def __init__(self, timeout: float = 10.0, max_retries: int = 0, backoff_factor: float = 0.3) -> None:
        self.session = requests.Session()
        self.timeout = timeout

        retry = Retry(
            total=max_retries,
            read=max_retries,
            connect=max_retries,
            backoff_factor=backoff_factor,
            status_forcelist=(500, 502, 503, 504),
            allowed_methods=("GET", "POST"),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        data: Any = None,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> requests.Response:
        return self.session.request(
            method.upper(),
            url,
            headers=headers,
            data=data,
            json=json,
            params=params,
            timeout=timeout if timeout is not None else self.timeout,
        )

    def post(self, url: str, **kwargs: Any) -> requests.Response:
        return self.request("POST", url, **kwargs)

    def get(self, url: str, **kwargs: Any) -> requests.Response:
        return self.request("GET", url, **kwargs)

    def close(self) -> None:
        self.session.close()
