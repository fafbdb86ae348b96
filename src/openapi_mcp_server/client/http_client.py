#!/usr/bin/env python3
# src/openapi_mcp_server/client/http_client.py
"""
HTTP client - execute OpenAPI operations with httpx

Routes tool arguments to their declared parameter locations (path, query,
header, cookie), builds the request body (JSON or multipart with local file
uploads) and decodes the response by content type. Responses with status
>= 400 raise ``HttpClientError`` carrying the decoded body, which the proxy
folds into a structured tool result.
"""

import base64
import logging
import mimetypes
from contextlib import ExitStack
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal
from urllib.parse import quote

import httpx
import orjson

from ..constants import CONTENT_TYPE_MULTIPART, DEFAULT_HTTP_TIMEOUT
from ..errors import ConfigurationError
from ..openapi.models import OpenAPIDocument, OperationEntry
from ..openapi.resolver import SchemaResolver, is_reference
from ..openapi.synthesizer import json_media
from ..openapi.translator import BINARY_FORMAT, has_type

logger = logging.getLogger(__name__)

ContentKind = Literal["text", "image", "binary"]

PARAMETER_LOCATIONS = ("path", "query", "header", "cookie")
BODY_ARGUMENT = "body"


@dataclass
class HttpResponse:
    """Decoded response of one executed operation."""

    data: Any
    status: int
    headers: dict[str, str] = field(default_factory=dict)


class HttpClientError(Exception):
    """Upstream API answered with an error status."""

    def __init__(
        self,
        message: str,
        status: int,
        data: Any = None,
        headers: dict[str, str] | None = None,
    ):
        self.status = status
        self.data = data
        self.headers = headers or {}
        super().__init__(message)


def get_content_type(content_type: str | None) -> ContentKind:
    """Classify a ``Content-Type`` header value."""
    if not content_type:
        return "binary"
    if "text" in content_type or "json" in content_type:
        return "text"
    if "image" in content_type:
        return "image"
    return "binary"


def pick_base_url(document: OpenAPIDocument, override: str | None = None) -> str:
    """Return the override, else the first declared server URL, else ``""``."""
    if override:
        return override.rstrip("/")
    servers = document.get("servers") or []
    if servers and isinstance(servers[0], dict):
        return str(servers[0].get("url") or "").rstrip("/")
    return ""


def _to_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return orjson.dumps(value).decode()
    return str(value)


class HttpClient:
    """Execute catalogue operations against the API's base URL."""

    def __init__(
        self,
        document: OpenAPIDocument,
        base_url: str | None = None,
        headers: dict[str, str] | None = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.document = document
        self.base_url = pick_base_url(document, base_url)
        if not self.base_url:
            raise ConfigurationError(
                "No base URL found in OpenAPI spec",
                suggestion="Declare servers[0].url in the document or pass --base-url",
            )
        self.resolver = SchemaResolver(document)
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers or {},
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def execute_operation(self, entry: OperationEntry, arguments: dict[str, Any]) -> HttpResponse:
        """Send the request for ``entry`` built from ``arguments``.

        Raises:
            HttpClientError: the API answered with status >= 400.
            httpx.HTTPError: transport failure.
            FileNotFoundError: a multipart upload path does not exist.
        """
        remaining = dict(arguments)
        url_path = entry.path
        query: dict[str, Any] = {}
        headers: dict[str, str] = {}
        cookies: dict[str, str] = {}

        for param in self._parameters(entry):
            name, location = param["name"], param.get("in")
            if name not in remaining or location not in PARAMETER_LOCATIONS:
                continue
            value = remaining.pop(name)
            if location == "path":
                url_path = url_path.replace("{" + name + "}", quote(_to_text(value), safe=""))
            elif location == "query":
                query[name] = _to_text(value) if isinstance(value, dict) else value
            elif location == "header":
                headers[name] = _to_text(value)
            else:
                cookies[name] = _to_text(value)

        if cookies:
            headers["Cookie"] = "; ".join(f"{k}={v}" for k, v in cookies.items())

        content = self._request_content(entry)
        method = entry.method.value.upper()

        with ExitStack() as stack:
            request_kwargs: dict[str, Any] = {"params": query, "headers": headers}
            if CONTENT_TYPE_MULTIPART in content:
                form_properties = self._form_properties(content[CONTENT_TYPE_MULTIPART])
                data, files = self._prepare_multipart(remaining, form_properties, stack)
                request_kwargs["data"] = data
                request_kwargs["files"] = files
            elif content and remaining:
                request_kwargs["json"] = self._prepare_json_body(content, remaining)
            elif remaining:
                # Operations without a body take leftover arguments as query parameters
                query.update(remaining)

            logger.debug(f"{method} {url_path} ({entry.operation_id})")
            response = await self._client.request(method, url_path, **request_kwargs)

        data = self._decode(response)
        response_headers = dict(response.headers)
        if response.status_code >= 400:
            logger.error(f"{entry.operation_id} failed with status {response.status_code}")
            raise HttpClientError(
                f"Request failed with status code {response.status_code}",
                response.status_code,
                data={"response": {"data": data, "status": response.status_code}},
                headers=response_headers,
            )
        return HttpResponse(data=data, status=response.status_code, headers=response_headers)

    # ------------------------------------------------------------------
    # Request building
    # ------------------------------------------------------------------

    def _parameters(self, entry: OperationEntry) -> list[dict[str, Any]]:
        path_item = (self.document.get("paths") or {}).get(entry.path) or {}
        merged: dict[tuple[Any, str], dict[str, Any]] = {}
        for source in (path_item.get("parameters") or [], entry.operation.get("parameters") or []):
            for raw in source:
                param = self.resolver.resolve_object(raw, "parameter")
                if param and param.get("name"):
                    merged[(param.get("in"), param["name"])] = param
        return list(merged.values())

    def _request_content(self, entry: OperationEntry) -> dict[str, Any]:
        if not entry.operation.get("requestBody"):
            return {}
        body = self.resolver.resolve_object(entry.operation["requestBody"], "request body")
        return (body or {}).get("content") or {}

    def _schema(self, node: Any) -> dict[str, Any]:
        return self.resolver.resolve_object(node, "schema") or {}

    def _prepare_json_body(self, content: dict[str, Any], remaining: dict[str, Any]) -> Any:
        media = json_media(content) or {}
        raw_schema = media.get("schema")
        # Mirrors the input schema: referenced or non-object bodies are advertised under ``body``
        wrapped = is_reference(raw_schema) or not (
            isinstance(raw_schema, dict) and has_type(raw_schema, "object") and raw_schema.get("properties")
        )
        if wrapped and BODY_ARGUMENT in remaining:
            return remaining[BODY_ARGUMENT]
        return remaining

    def _form_properties(self, media: dict[str, Any]) -> dict[str, Any]:
        schema = self._schema(media.get("schema"))
        return schema.get("properties") or {}

    def _is_file_field(self, prop: Any) -> bool:
        schema = self._schema(prop)
        if schema.get("format") == BINARY_FORMAT:
            return True
        if has_type(schema, "array"):
            return self._schema(schema.get("items")).get("format") == BINARY_FORMAT
        return False

    def _prepare_multipart(
        self,
        remaining: dict[str, Any],
        form_properties: dict[str, Any],
        stack: ExitStack,
    ) -> tuple[dict[str, str], list[tuple[str, tuple[str, Any, str]]]]:
        data: dict[str, str] = {}
        files: list[tuple[str, tuple[str, Any, str]]] = []
        for name, value in remaining.items():
            if name in form_properties and self._is_file_field(form_properties[name]):
                paths = value if isinstance(value, list) else [value]
                for file_path in paths:
                    path = Path(str(file_path)).expanduser()
                    mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
                    files.append((name, (path.name, stack.enter_context(path.open("rb")), mime_type)))
            else:
                data[name] = _to_text(value)
        return data, files

    # ------------------------------------------------------------------
    # Response decoding
    # ------------------------------------------------------------------

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        kind = get_content_type(response.headers.get("content-type"))
        if kind == "text":
            try:
                return orjson.loads(response.content)
            except orjson.JSONDecodeError:
                return response.text
        return base64.b64encode(response.content).decode("ascii")
