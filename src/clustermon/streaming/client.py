"""
HTTP client for the realtime metrics endpoint.

The client issues a single GET per call and hands the response body to a
MetricsStreamDecoder. Request signing is left to the caller: pass a
pre-configured aiohttp.ClientSession, or extra headers such as a bearer
token.
"""

import asyncio
import json
import logging
import xml.etree.ElementTree as ET
from typing import Dict, Optional, Tuple

import aiohttp

from ..models.options import MetricsOptions
from ..validation import MetricsRequestError
from .decoder import MetricsSink, MetricsStreamDecoder

logger = logging.getLogger(__name__)

METRICS_PATH = "/minio/admin/v3/metrics"
CHUNK_SIZE = 64 * 1024


def parse_error_body(body: bytes) -> Tuple[str, str]:
    """
    Extract (code, message) from an admin API error body.

    The server answers with a JSON object; some proxies answer with the
    S3-style XML error document instead. Anything else becomes the message.
    """
    text = body.decode("utf-8", errors="replace").strip()
    if not text:
        return "", ""
    if text.startswith("{"):
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            return "", text
        if isinstance(data, dict):
            return str(data.get("Code", "")), str(data.get("Message", ""))
        return "", text
    if text.startswith("<"):
        try:
            root = ET.fromstring(text)
        except ET.ParseError:
            return "", text
        return root.findtext("Code", default=""), root.findtext("Message", default="")
    return "", text


class MetricsClient:
    """
    Streams RealtimeMetrics envelopes from one cluster endpoint.

    Usage:
        async with MetricsClient("localhost:9000") as client:
            await client.metrics(MetricsOptions(types=MetricType.CPU, n=3), sink)
    """

    def __init__(
        self,
        endpoint: str,
        session: Optional[aiohttp.ClientSession] = None,
        secure: bool = False,
        headers: Optional[Dict[str, str]] = None,
        request_timeout: Optional[float] = None,
    ):
        """
        Args:
            endpoint: host[:port] of the server
            session: Session to reuse; it is not closed by close()
            secure: Use https
            headers: Extra request headers
            request_timeout: Connect timeout in seconds for owned sessions
        """
        self.endpoint = endpoint
        self.secure = secure
        self.headers = dict(headers or {})
        self.request_timeout = request_timeout
        self._session = session
        self._owns_session = session is None

    @property
    def url(self) -> str:
        scheme = "https" if self.secure else "http"
        return f"{scheme}://{self.endpoint}{METRICS_PATH}"

    async def __aenter__(self) -> "MetricsClient":
        return self

    async def __aexit__(self, exc_type, exc_value, traceback) -> None:
        await self.close()

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=None, sock_connect=self.request_timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the session if this client created it."""
        session = self._session
        if session is None or not self._owns_session:
            return
        if not session.closed:
            await session.close()
        self._session = None

    async def metrics(self, options: MetricsOptions, sink: MetricsSink,
                      timeout: Optional[float] = None) -> int:
        """
        Request a metrics stream and deliver every envelope to ``sink``.

        Args:
            options: Stream selection and sampling options
            sink: Called once per envelope, awaited if it returns a coroutine
            timeout: Deadline in seconds for the whole stream

        Returns:
            Number of envelopes delivered

        Raises:
            MetricsRequestError: If the server answers with a non-200 status
            UnexpectedEndOfStreamError: If the body ends before a final frame
            StreamDecodeError: If a frame cannot be decoded
            aiohttp.ClientError: On transport failures
            TimeoutError: If ``timeout`` elapses
        """
        session = self._ensure_session()
        params = options.to_query_params()
        logger.debug(f"Requesting metrics from {self.url} with {params}")

        async with asyncio.timeout(timeout):
            async with session.get(self.url, params=params, headers=self.headers) as resp:
                if resp.status != 200:
                    body = await resp.read()
                    code, message = parse_error_body(body)
                    logger.warning(f"Metrics request to {self.endpoint} failed: {resp.status} {code} {message}")
                    raise MetricsRequestError(resp.status, code, message)
                decoder = MetricsStreamDecoder(source_name=self.endpoint)
                return await decoder.run(resp.content.iter_chunked(CHUNK_SIZE), sink)
