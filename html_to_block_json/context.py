"""Request context for rendering a page from a ``/<org>/<site>/<path>`` URL."""

import os
from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qs, urlparse


@dataclass
class ExtractionContext:
    org: str
    site: str
    branch: str
    eds_domain_url: str
    content_path: str
    use_schema: bool = False
    html: bool = False
    preview: bool = False
    transformer: Optional[str] = None

    @property
    def page_url(self) -> str:
        return f"{self.eds_domain_url}/{self.content_path}"

    @property
    def schema_location(self) -> str:
        """Where schemas are loaded from; SCHEMA_BASE_URL overrides the site domain."""
        override = os.environ.get("SCHEMA_BASE_URL", "").strip()
        return override or self.eds_domain_url


def _flag(query, name: str) -> bool:
    return query.get(name, [""])[0] == "true"


def get_context(url: str) -> ExtractionContext:
    """Build the context from a request URL or path.

    Raises ValueError when the path has no org and site.
    """
    parsed = urlparse(url)
    parts = parsed.path.split("/")
    org = parts[1] if len(parts) > 1 else ""
    site = parts[2] if len(parts) > 2 else ""
    if not org or not site:
        raise ValueError("Usage: /org/site/path")

    query = parse_qs(parsed.query)
    preview = _flag(query, "preview")
    branch = query.get("branch", [""])[0] or "main"
    transformer = query.get("transformer", [""])[0] or None

    return ExtractionContext(
        org=org,
        site=site,
        branch=branch,
        eds_domain_url=f"https://{branch}--{site}--{org}.aem.{'page' if preview else 'live'}",
        content_path="/".join(parts[3:]),
        use_schema=_flag(query, "schema"),
        html=_flag(query, "html"),
        preview=preview,
        transformer=transformer,
    )
