"""Request handling shared by the dev server and the serverless handler."""

import asyncio
import json
import sys
from datetime import datetime, timezone
from typing import Any, NamedTuple, Optional
from urllib.parse import parse_qs, urlparse

from .context import get_context
from .exceptions import MissingMainError, PageFetchError
from .page import convert_html, render_page


def api_log(level: str, event: str, **kwargs) -> None:
    """Structured stdout log line; all keys JSON-serializable."""
    payload = {"ts": datetime.now(timezone.utc).isoformat(), "level": level, "event": event, **{k: v for k, v in kwargs.items() if v is not None}}
    try:
        line = json.dumps(payload, default=str, ensure_ascii=False)
    except (TypeError, ValueError):
        line = json.dumps({"ts": datetime.now(timezone.utc).isoformat(), "level": level, "event": event})
    print(line, flush=True)
    sys.stdout.flush()


class Response(NamedTuple):
    status: int
    content_type: str
    body: Any


def json_response(payload: Any, status: int = 200) -> Response:
    return Response(status, "application/json; charset=utf-8", payload)


def encode_body(response: Response) -> bytes:
    if isinstance(response.body, (bytes, bytearray)):
        return bytes(response.body)
    if isinstance(response.body, str):
        return response.body.encode("utf-8")
    return json.dumps(response.body, indent=2, ensure_ascii=False).encode("utf-8")


def handle_page_request(path: str) -> Response:
    """GET /<org>/<site>/<path>?schema=true|html=true|transformer=..."""
    try:
        ctx = get_context(path)
    except ValueError as exc:
        api_log("WARN", "page_bad_path", path=path)
        return json_response({"error": str(exc)}, status=400)

    api_log("INFO", "page_start", url=ctx.page_url, schema=ctx.use_schema, html=ctx.html)
    try:
        result = asyncio.run(render_page(ctx))
    except PageFetchError as exc:
        api_log("ERROR", "page_fetch_failed", url=ctx.page_url, status=exc.status, error=str(exc))
        return json_response({"error": str(exc)}, status=exc.status or 502)
    except MissingMainError as exc:
        api_log("ERROR", "page_missing_main", url=ctx.page_url)
        return json_response({"error": str(exc)}, status=500)
    except Exception as exc:
        api_log("ERROR", "page_failed", url=ctx.page_url, error=str(exc))
        return json_response({"error": f"Extraction failed: {exc}"}, status=500)

    api_log("INFO", "page_ok", url=ctx.page_url)
    return Response(200, result.content_type, result.body)


def handle_extract_request(path: str, html_content: str) -> Response:
    """POST /extract[?schemas=<location>] with an HTML body."""
    query = parse_qs(urlparse(path).query)
    schema_location: Optional[str] = query.get("schemas", [""])[0] or None

    try:
        result = asyncio.run(convert_html(html_content, schema_location))
    except MissingMainError as exc:
        api_log("ERROR", "extract_missing_main")
        return json_response({"error": str(exc)}, status=400)
    except Exception as exc:
        api_log("ERROR", "extract_failed", error=str(exc))
        return json_response({"error": f"Extraction failed: {exc}"}, status=500)

    api_log("INFO", "extract_ok", schemas=schema_location)
    return json_response(result, status=200)
