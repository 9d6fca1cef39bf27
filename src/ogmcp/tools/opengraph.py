# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""OpenGraph content tools.

Each tool wraps one ``/api/1.1`` endpoint and needs the session's app id.
Downstream failures are returned as ``{"error": ...}`` results, never raised.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..errors import DownstreamFailure
from ..server.adapters import error_result
from ..tool import HandlerContext, tool
from ._fields import WebUrl


class UrlInput(BaseModel):
    url: WebUrl = Field(description="URL of the webpage to analyze meta tags from")


class ScrapeInput(BaseModel):
    url: WebUrl = Field(description="URL of the webpage to scrape data from")


class ScreenshotInput(BaseModel):
    url: WebUrl = Field(description="URL of the webpage to screenshot")


class QueryInput(BaseModel):
    site: WebUrl = Field(description="Site to request (full URL)")
    query: str = Field(description="Query to ask about the site")
    response_structure: Any = Field(
        default=None, alias="responseStructure", description="Optional JSON for response structure"
    )

    model_config = ConfigDict(populate_by_name=True)


class ExtractInput(BaseModel):
    site: WebUrl = Field(description="Site to request (full URL)")
    html_elements: list[str] = Field(description="Array of HTML selectors to extract from the page")


@tool(
    "getOgData",
    input_model=UrlInput,
    description="Get OpenGraph data from a given URL",
    requires_credential=True,
    annotations={"readOnlyHint": True, "openWorldHint": True},
)
async def get_og_data(args: UrlInput, ctx: HandlerContext):
    try:
        data = await ctx.opengraph.site(args.url, app_id=ctx.credential)
    except DownstreamFailure as exc:
        return error_result(f"Error fetching OG Data: {exc}")
    return {
        "hybridGraph": data.hybridGraph or {},
        "openGraph": data.openGraph or {},
        "htmlInferred": data.htmlInferred or {},
    }


@tool(
    "getOgScrapeData",
    input_model=ScrapeInput,
    description="Scrape data from a given URL using OpenGraph's scrape endpoint",
    requires_credential=True,
    annotations={"readOnlyHint": True, "openWorldHint": True},
)
async def get_og_scrape_data(args: ScrapeInput, ctx: HandlerContext):
    try:
        html = await ctx.opengraph.scrape(args.url, app_id=ctx.credential)
    except DownstreamFailure as exc:
        return error_result(f"Error scraping data: {exc}")
    return {"scrapeData": html}


@tool(
    "getOgScreenshot",
    input_model=ScreenshotInput,
    description="Get a screenshot of a given URL using OpenGraph's screenshot endpoint",
    requires_credential=True,
    annotations={"readOnlyHint": True, "openWorldHint": True},
)
async def get_og_screenshot(args: ScreenshotInput, ctx: HandlerContext):
    try:
        shot = await ctx.opengraph.screenshot(args.url, app_id=ctx.credential)
    except DownstreamFailure as exc:
        return error_result(f"Error getting screenshot: {exc}")
    return {"screenshotUrl": shot.screenshotUrl}


@tool(
    "getOgQuery",
    input_model=QueryInput,
    description="Query a site with a custom question and response structure using the OG Query endpoint.",
    requires_credential=True,
    annotations={"readOnlyHint": True, "openWorldHint": True},
)
async def get_og_query(args: QueryInput, ctx: HandlerContext):
    try:
        result = await ctx.opengraph.query(
            args.site, args.query, response_structure=args.response_structure, app_id=ctx.credential
        )
    except DownstreamFailure as exc:
        return error_result(f"Error querying site: {exc}")
    return {"result": result}


@tool(
    "getOgExtract",
    input_model=ExtractInput,
    description="Extract specified HTML elements from a given URL using OpenGraph's scrape endpoint.",
    requires_credential=True,
    annotations={"readOnlyHint": True, "openWorldHint": True},
)
async def get_og_extract(args: ExtractInput, ctx: HandlerContext):
    try:
        extracted = await ctx.opengraph.extract(args.site, args.html_elements, app_id=ctx.credential)
    except DownstreamFailure as exc:
        return error_result(f"Error extracting HTML elements: {exc}")
    return {"extracted": extracted}


OPENGRAPH_TOOLS = (get_og_data, get_og_scrape_data, get_og_screenshot, get_og_query, get_og_extract)


__all__ = [
    "OPENGRAPH_TOOLS",
    "ExtractInput",
    "QueryInput",
    "ScrapeInput",
    "ScreenshotInput",
    "UrlInput",
    "get_og_data",
    "get_og_extract",
    "get_og_query",
    "get_og_scrape_data",
    "get_og_screenshot",
]
