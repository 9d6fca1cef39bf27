# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Client for the OpenGraph.io content API (``/api/1.1``).

Every endpoint takes the target page URL percent-encoded as a path segment
and the caller's ``app_id`` as a query parameter.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from ..errors import DownstreamFailure
from ._http import decode_json, send


MISSING_APP_ID = (
    "OpenGraph app_id is required. Provide it as an argument or set OPENGRAPH_APP_ID environment variable."
)


class SiteData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    hybridGraph: dict[str, Any] | None = None
    openGraph: dict[str, Any] | None = None
    htmlInferred: dict[str, Any] | None = None


class ScreenshotData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    screenshotUrl: str
    message: str | None = None


class OpenGraphClient:
    def __init__(self, http: httpx.AsyncClient, *, base_url: str, default_app_id: str | None = None) -> None:
        self._http = http
        self._base_url = base_url.rstrip("/")
        self._default_app_id = default_app_id

    async def site(self, url: str, *, app_id: str | None) -> SiteData:
        response = await send(
            self._http, "GET", self._endpoint("site", url), params=self._params(app_id), action="fetch OG data"
        )
        try:
            return SiteData.model_validate(decode_json(response, action="fetch OG data"))
        except ValidationError as exc:
            raise DownstreamFailure(f"Unexpected OG data response: {exc.error_count()} invalid field(s)") from exc

    async def scrape(self, url: str, *, app_id: str | None) -> str:
        response = await send(
            self._http, "GET", self._endpoint("scrape", url), params=self._params(app_id), action="scrape site"
        )
        return response.text

    async def screenshot(self, url: str, *, app_id: str | None) -> ScreenshotData:
        params = self._params(app_id, quality="80", dimensions="md", full_page="true")
        response = await send(
            self._http, "GET", self._endpoint("screenshot", url), params=params, action="capture screenshot"
        )
        try:
            return ScreenshotData.model_validate(decode_json(response, action="capture screenshot"))
        except ValidationError as exc:
            raise DownstreamFailure("Screenshot response did not include a screenshotUrl") from exc

    async def query(self, site: str, query: str, *, response_structure: Any = None, app_id: str | None) -> Any:
        body: dict[str, Any] = {"query": query}
        if response_structure is not None:
            body["responseStructure"] = response_structure
        response = await send(
            self._http,
            "POST",
            self._endpoint("query", site),
            params=self._params(app_id),
            json=body,
            action="query site",
        )
        return decode_json(response, action="query site")

    async def extract(self, site: str, html_elements: list[str], *, app_id: str | None) -> dict[str, list[str]]:
        """Return the text of every element matching each selector, keyed by selector."""
        params = self._params(app_id, html_elements=",".join(html_elements))
        response = await send(
            self._http, "GET", self._endpoint("extract", site), params=params, action="extract HTML elements"
        )
        payload = decode_json(response, action="extract HTML elements")

        extracted: dict[str, list[str]] = {selector: [] for selector in html_elements}
        tags = payload.get("tags", []) if isinstance(payload, dict) else []
        for item in tags:
            if isinstance(item, dict) and item.get("tag"):
                extracted.setdefault(str(item["tag"]), []).append(str(item.get("innerText", "")))
        return extracted

    def _endpoint(self, name: str, url: str) -> str:
        return f"{self._base_url}/{name}/{quote(url, safe='')}"

    def _params(self, app_id: str | None, **extra: str) -> dict[str, str]:
        resolved = app_id or self._default_app_id
        if not resolved:
            raise DownstreamFailure(MISSING_APP_ID)
        return {"accept_lang": "auto", **extra, "app_id": resolved}


__all__ = ["MISSING_APP_ID", "OpenGraphClient", "ScreenshotData", "SiteData"]
