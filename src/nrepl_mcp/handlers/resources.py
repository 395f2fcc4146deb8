"""Resource handlers - session state and var introspection under ``clojure://``."""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum

from nrepl_mcp.evaluator.base import Evaluator
from nrepl_mcp.evaluator.clojure import doc_form, namespaces_form, source_form, unquote_printed
from nrepl_mcp.exceptions import ResourceError
from nrepl_mcp.session import BridgeSession
from nrepl_mcp.types.resources import ReadResourceResult, Resource, TextResourceContents

logger = logging.getLogger(__name__)

CURRENT_NS_URI = "clojure://session/current-ns"
NAMESPACES_URI = "clojure://session/namespaces"
DOC_PREFIX = "clojure://doc/"
SOURCE_PREFIX = "clojure://source/"


class ResourceKind(Enum):
    CURRENT_NS = "current-ns"
    NAMESPACES = "namespaces"
    DOC = "doc"
    SOURCE = "source"


@dataclass(frozen=True)
class ResourceRef:
    """A parsed resource URI: which kind, and the symbol for doc/source (empty otherwise)."""

    uri: str
    kind: ResourceKind
    symbol: str = ""


def parse_resource_uri(uri: str) -> ResourceRef:
    """Map a URI to its resource kind.

    Raises:
        ResourceError: for any URI the bridge does not serve
    """
    if uri == CURRENT_NS_URI:
        return ResourceRef(uri, ResourceKind.CURRENT_NS)
    if uri == NAMESPACES_URI:
        return ResourceRef(uri, ResourceKind.NAMESPACES)
    if uri.startswith(DOC_PREFIX) and len(uri) > len(DOC_PREFIX):
        return ResourceRef(uri, ResourceKind.DOC, uri.removeprefix(DOC_PREFIX))
    if uri.startswith(SOURCE_PREFIX) and len(uri) > len(SOURCE_PREFIX):
        return ResourceRef(uri, ResourceKind.SOURCE, uri.removeprefix(SOURCE_PREFIX))
    raise ResourceError(f"Unknown resource URI: {uri}")


RESOURCE_CATALOG: list[Resource] = [
    Resource(
        uri=CURRENT_NS_URI,
        name="Current Namespace",
        description="The current default namespace in the REPL session",
        mime_type="text/plain",
    ),
    Resource(
        uri=NAMESPACES_URI,
        name="Session Namespaces",
        description="Currently loaded namespaces",
        mime_type="application/json",
    ),
]


def _printed_text(value: str | None) -> str | None:
    """The text behind a printed string result, or None for a blank or nil result."""
    printed = (value or "").strip()
    if printed in ("", "nil"):
        return None
    return unquote_printed(printed)


class ResourceHandlers:
    """Reads ``clojure://`` resources against one session and one evaluator."""

    def __init__(self, session: BridgeSession, evaluator: Evaluator) -> None:
        self.session = session
        self.evaluator = evaluator
        self._readers: dict[ResourceKind, Callable[[ResourceRef], Awaitable[TextResourceContents]]] = {
            ResourceKind.CURRENT_NS: self.current_ns,
            ResourceKind.NAMESPACES: self.namespaces,
            ResourceKind.DOC: self.doc,
            ResourceKind.SOURCE: self.source,
        }

    def list_resources(self) -> list[Resource]:
        return list(RESOURCE_CATALOG)

    async def read(self, uri: str) -> ReadResourceResult:
        ref = parse_resource_uri(uri)
        logger.debug("Reading resource %s", uri)
        return ReadResourceResult(contents=[await self._readers[ref.kind](ref)])

    async def current_ns(self, ref: ResourceRef) -> TextResourceContents:
        return TextResourceContents(uri=ref.uri, mime_type="text/plain", text=self.session.current_namespace)

    async def namespaces(self, ref: ResourceRef) -> TextResourceContents:
        outcome = await self.evaluator.evaluate(namespaces_form(), self.session.current_namespace)
        names = [line.strip() for line in outcome.out.splitlines() if line.strip()]
        return TextResourceContents(uri=ref.uri, mime_type="application/json", text=json.dumps(names))

    async def doc(self, ref: ResourceRef) -> TextResourceContents:
        outcome = await self.evaluator.evaluate(doc_form(ref.symbol), self.session.current_namespace)
        text = _printed_text(outcome.value) or f"No documentation found for: {ref.symbol}"
        return TextResourceContents(uri=ref.uri, mime_type="text/plain", text=text)

    async def source(self, ref: ResourceRef) -> TextResourceContents:
        outcome = await self.evaluator.evaluate(source_form(ref.symbol), self.session.current_namespace)
        text = _printed_text(outcome.value) or f"No source found for: {ref.symbol}"
        return TextResourceContents(uri=ref.uri, mime_type="text/clojure", text=text)
