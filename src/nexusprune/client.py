"""REST collaborators for the Nexus 2 lucene search and content endpoints."""

from __future__ import annotations

import base64
import enum
import http.client
import logging
from dataclasses import dataclass
from typing import Callable, Mapping
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen
from xml.etree.ElementTree import Element

from defusedxml.common import DefusedXmlException
from defusedxml.ElementTree import ParseError, fromstring

from .config import DEFAULT_TIMEOUT, NexusEndpoint
from .coordinates import Gav

logger = logging.getLogger(__name__)

_Response = tuple[int, bytes]
_TRUE_VALUES = frozenset({"true", "1"})
Transport = Callable[[str, str, Mapping[str, str], float | None], _Response]


class NexusError(RuntimeError):
    """Raised when Nexus cannot be reached or answers unexpectedly."""

    def __init__(self, message: str, *, url: str, status: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


class DeleteOutcome(enum.Enum):
    DELETED = "deleted"
    ALREADY_ABSENT = "already_absent"


@dataclass(frozen=True, slots=True)
class SearchResult:
    """Decoded ``searchNGResponse`` payload."""

    count: int
    from_: int
    total_count: int
    too_many_results: bool
    artifacts: tuple[Gav, ...] = ()

    @property
    def is_truncated(self) -> bool:
        # Nexus sometimes answers 200 out of 473, sometimes 73 out of 247.
        return self.too_many_results or len(self.artifacts) != self.total_count


def _send(method: str, url: str, headers: Mapping[str, str], timeout: float | None) -> _Response:
    request = Request(url, headers=dict(headers), method=method)
    try:
        with urlopen(request, timeout=timeout) as response:  # type: ignore[no-untyped-call]
            return response.getcode(), response.read()
    except HTTPError as exc:
        body = exc.read() if exc.fp is not None else b""
        return exc.code, body


def _child_text(element: Element, tag: str) -> str:
    child = element.find(tag)
    if child is None or child.text is None:
        return ""
    return child.text.strip()


def _child_int(element: Element, tag: str) -> int:
    text = _child_text(element, tag)
    return int(text) if text else 0


def parse_search_response(payload: bytes | str) -> SearchResult:
    """Decode a lucene search response body.

    Missing numeric elements default to ``0`` and a missing
    ``tooManyResults`` to ``False``. Raises ``ValueError`` for malformed XML
    or non-numeric counts.
    """

    try:
        root = fromstring(payload)
    except (ParseError, DefusedXmlException) as exc:
        raise ValueError(f"malformed search response: {exc}") from exc

    artifacts = tuple(
        Gav(
            group_id=_child_text(node, "groupId"),
            artifact_id=_child_text(node, "artifactId"),
            version=_child_text(node, "version"),
            latest_release=_child_text(node, "latestRelease"),
        )
        for node in root.findall("data/artifact")
    )
    try:
        return SearchResult(
            count=_child_int(root, "count"),
            from_=_child_int(root, "from"),
            total_count=_child_int(root, "totalCount"),
            too_many_results=_child_text(root, "tooManyResults").lower() in _TRUE_VALUES,
            artifacts=artifacts,
        )
    except ValueError as exc:
        raise ValueError(f"malformed search response: {exc}") from exc


class NexusClient:
    """Search and delete artifacts in one Nexus repository."""

    def __init__(
        self,
        endpoint: NexusEndpoint,
        *,
        timeout: float | None = DEFAULT_TIMEOUT,
        transport: Transport | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._timeout = timeout
        self._transport = transport or _send
        self._base_url = endpoint.base_url()
        logger.info("base URL: %s", self._base_url)

    def search_url(self, query: Gav, count: int) -> str:
        params: list[tuple[str, str]] = [("g", query.group_id), ("count", str(count))]
        if self._endpoint.repository_id:
            params.append(("repositoryId", self._endpoint.repository_id))
        if query.artifact_id:
            params.append(("a", query.artifact_id))
        if query.version:
            params.append(("v", query.version))
        return f"{self._base_url}service/local/lucene/search?{urlencode(params)}"

    def delete_url(self, gav: Gav) -> str:
        return (
            f"{self._base_url}service/local/repositories/"
            f"{self._endpoint.repository_id}/content/{gav.default_layout()}"
        )

    def _request(self, method: str, url: str, headers: Mapping[str, str]) -> _Response:
        try:
            return self._transport(method, url, headers, self._timeout)
        except (URLError, OSError, http.client.HTTPException, ValueError) as exc:
            raise NexusError(f"cannot reach {url}: {exc}", url=url) from exc

    def _authorization(self) -> dict[str, str]:
        credentials = f"{self._endpoint.username}:{self._endpoint.password}"
        token = base64.b64encode(credentials.encode("utf-8")).decode("ascii")
        return {"Authorization": f"Basic {token}"}

    def search(self, query: Gav, count: int) -> SearchResult:
        url = self.search_url(query, count)
        status, body = self._request("GET", url, {"Accept": "application/xml"})
        logger.info("%s returns HTTP status code %s", url, status)
        if status != 200:
            raise NexusError(f"expected status 200 but got {status}", url=url, status=status)
        try:
            return parse_search_response(body)
        except ValueError as exc:
            raise NexusError(str(exc), url=url) from exc

    def delete(self, gav: Gav) -> DeleteOutcome:
        url = self.delete_url(gav)
        logger.info("HTTP DELETE %s", url)
        status, _ = self._request("DELETE", url, self._authorization())
        if status == 204:
            return DeleteOutcome.DELETED
        if status == 404:
            logger.warning("%s is already gone", gav.concise_notation())
            return DeleteOutcome.ALREADY_ABSENT
        raise NexusError(f"expected status 204 but got {status}", url=url, status=status)


__all__ = [
    "DeleteOutcome",
    "NexusClient",
    "NexusError",
    "SearchResult",
    "Transport",
    "parse_search_response",
]
