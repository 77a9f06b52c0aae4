"""
Web proxy for the search backend's REST surface (remote facets).
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple, Union

import requests

logger = logging.getLogger(__name__)


@dataclass
class ProxyResponse:
    status_code: int
    body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class WebProxy:
    """Sends raw requests to base_url + endpoint + path and returns status and body."""

    def __init__(
        self,
        url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        endpoint: str = "",
        read_timeout: Optional[float] = None,
        connect_timeout: Optional[float] = None,
        verify: bool = True,
        session: Optional[requests.Session] = None,
    ):
        self.url = url
        self.endpoint = endpoint or ""
        self.timeout: Union[None, Tuple[Optional[float], Optional[float]]] = None
        if read_timeout is not None or connect_timeout is not None:
            self.timeout = (connect_timeout, read_timeout)
        self.session = session or requests.Session()
        self.session.verify = verify
        if username and password:
            self.session.auth = (username, password)
        logger.info(f"Web proxy created for {url} with username \"{username}\"")

    def build_url(self, request_path: str) -> str:
        return self.url.rstrip("/") + self.endpoint + request_path

    def proxy_response(
        self,
        request_path: str,
        method: str = "GET",
        accept: Optional[str] = None,
        content_type: Optional[str] = None,
        body: Optional[str] = None,
    ) -> ProxyResponse:
        """Issue the request; transport errors propagate as requests exceptions."""
        headers = {}
        if accept is not None:
            headers["Accept"] = accept
        if content_type is not None:
            headers["Content-Type"] = content_type

        url = self.build_url(request_path)
        logger.debug(f"{method} {url} headers={headers}")
        response = self.session.request(
            method,
            url,
            headers=headers,
            data=body.encode("utf-8") if body is not None else None,
            timeout=self.timeout,
        )
        logger.debug(f"{method} {url} -> {response.status_code}")
        return ProxyResponse(status_code=response.status_code, body=response.text)
