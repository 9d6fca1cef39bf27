# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Image agent tools.

``generateImage`` and ``iterateImage`` return the finished image inline
(base64 ``ImageContent``) followed by a JSON metadata block. When the agent
finishes but the file cannot be fetched, only the metadata is returned, with
a ``warning``. The session app id is forwarded when present; the agent falls
back to the server default otherwise.
"""

from __future__ import annotations

import base64
import re
from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

from .. import types
from ..api.image_agent import AssetFile, GenerateResult
from ..errors import DownstreamFailure
from ..server.adapters import error_result
from ..tool import HandlerContext, tool
from ..utils import to_json
from ._fields import CAMEL_CONFIG, UuidStr


ImageKind = Literal["illustration", "diagram", "icon", "social-card", "qr-code"]
AspectRatio = Literal[
    "og-image",
    "twitter-card",
    "twitter-post",
    "linkedin-post",
    "facebook-post",
    "instagram-square",
    "instagram-portrait",
    "instagram-story",
    "youtube-thumbnail",
    "wide",
    "square",
    "portrait",
    "icon-small",
    "icon-medium",
    "icon-large",
]
StylePreset = Literal[
    "github-dark",
    "github-light",
    "notion",
    "vercel",
    "linear",
    "stripe",
    "neon-cyber",
    "pastel",
    "minimal-mono",
    "corporate",
    "startup",
    "documentation",
    "technical",
]
DiagramTemplate = Literal[
    "auth-flow",
    "oauth2-flow",
    "crud-api",
    "microservices",
    "ci-cd",
    "gitflow",
    "database-schema",
    "state-machine",
    "user-journey",
    "cloud-architecture",
    "system-context",
]
DiagramSyntax = Literal["mermaid", "d2", "vega"]

ErrorType = Literal["syntax_error", "request_error", "server_error"]

_SYNTAX_MARKERS = (
    "syntax error",
    "parse error",
    "mermaid syntax",
    "d2 syntax",
    "vega spec",
    "vega render",
    "render failed",
)
_REQUEST_MARKERS = ("invalid request", "is required", "must be", "not found", "invalid uuid")

_IMAGE_FORMAT = re.compile(r"image/(\w+)")


def classify_error(message: str | None) -> ErrorType:
    """Bucket an agent error so callers know whether to fix input or retry."""
    if not message:
        return "server_error"
    lower = message.lower()
    if any(marker in lower for marker in _SYNTAX_MARKERS):
        return "syntax_error"
    if any(marker in lower for marker in _REQUEST_MARKERS):
        return "request_error"
    return "server_error"


class CropBox(BaseModel):
    model_config = CAMEL_CONFIG

    crop_x1: int | None = Field(default=None, ge=0, description="Crop: X coordinate of the top-left corner in pixels")
    crop_y1: int | None = Field(default=None, ge=0, description="Crop: Y coordinate of the top-left corner in pixels")
    crop_x2: int | None = Field(
        default=None, ge=0, description="Crop: X coordinate of the bottom-right corner in pixels"
    )
    crop_y2: int | None = Field(
        default=None, ge=0, description="Crop: Y coordinate of the bottom-right corner in pixels"
    )


class GenerateImageInput(CropBox):
    prompt: str | None = Field(
        default=None,
        description=(
            "For diagrams: either a natural language description or pure Mermaid/D2/Vega syntax. "
            "For illustrations: describe the image content, style and composition."
        ),
    )
    kind: ImageKind = Field(default="illustration", description="The type of image to create")

    aspect_ratio: AspectRatio | None = Field(default=None, description="Preset aspect ratio (e.g. 'og-image')")
    style_preset: StylePreset | None = Field(default=None, description="Preset style with brand colors")
    diagram_template: DiagramTemplate | None = Field(default=None, description="Pre-built diagram template")

    project_context: str | None = Field(default=None, description="Description of the project this image is for")
    brand_colors: list[str] | None = Field(default=None, description="Brand colors as hex codes")
    style_preferences: str | None = Field(default=None, description="Style preferences such as 'modern'")
    reference_asset_id: UuidStr | None = Field(default=None, description="Asset UUID to use as style reference")

    diagram_syntax: DiagramSyntax | None = Field(default=None, description="Preferred diagram syntax")
    diagram_code: str | None = Field(
        default=None,
        description="Pre-validated diagram source rendered as-is. Must be used with diagramFormat.",
    )
    diagram_format: DiagramSyntax | None = Field(
        default=None, description="Format of diagramCode. Required when diagramCode is provided."
    )
    template: str | None = Field(default=None, description="Template name for template-based graphics")
    labels: list[str] | None = Field(default=None, description="Labels for templates/diagrams")

    model: str | None = Field(default=None, description="Model: 'gpt-image-1.5', 'gemini-flash', 'gemini-pro'")
    quality: Literal["low", "medium", "high", "fast"] | None = Field(default=None, description="Quality setting")
    transparent: bool | None = Field(default=None, description="Request transparent background")

    auto_crop: bool | None = Field(default=None, description="Auto-crop transparent edges")
    auto_crop_padding: float | None = Field(default=None, description="Padding for auto-crop (default: 20)")
    corner_radius: float | None = Field(default=None, description="Corner radius for rounded corners")

    output_style: Literal["draft", "standard", "premium"] | None = Field(
        default=None, description="Polish level: 'draft' (fast), 'standard' (AI-enhanced), 'premium' (full polish)"
    )
    layout_preservation: Literal["strict", "flexible", "creative"] | None = Field(
        default=None, description="How strictly to preserve layout during premium polish"
    )

    @model_validator(mode="after")
    def _check_source(self) -> GenerateImageInput:
        if not self.prompt and not self.diagram_code:
            raise ValueError("Either prompt or diagramCode is required")
        if self.diagram_code and not self.diagram_format:
            raise ValueError("diagramFormat is required when diagramCode is provided")
        return self


class IterateImageInput(CropBox):
    session_id: UuidStr = Field(description="The session UUID containing the image to iterate on")
    asset_id: UuidStr = Field(description="The asset UUID of the image to iterate on")
    prompt: str = Field(
        description="Detailed instruction for the iteration. Be specific about what to change."
    )


class SessionInput(BaseModel):
    model_config = CAMEL_CONFIG

    session_id: UuidStr = Field(description="The session UUID to inspect")


class AssetInput(BaseModel):
    model_config = CAMEL_CONFIG

    session_id: UuidStr = Field(description="The session UUID containing the asset")
    asset_id: UuidStr = Field(description="The asset UUID to export")


def _compact(payload: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in payload.items() if value is not None}


def _metadata(result: GenerateResult, **extra: Any) -> dict[str, Any]:
    return _compact(
        {
            "sessionId": result.session_id,
            "assetId": result.asset_id,
            "parentAssetId": getattr(result, "parent_asset_id", None),
            "status": result.status,
            "format": result.format,
            "width": result.width,
            "height": result.height,
            "url": result.url,
            **extra,
        }
    )


def _image_block(asset: AssetFile) -> types.ImageContent:
    return types.ImageContent(
        type="image", data=base64.b64encode(asset.data).decode("ascii"), mimeType=asset.content_type
    )


async def _with_inline_image(
    ctx: HandlerContext, result: GenerateResult, metadata: dict[str, Any], *, warning: str
) -> Any:
    try:
        asset = await ctx.image_agent.get_asset_file(result.asset_id, app_id=ctx.credential)
    except DownstreamFailure as exc:
        ctx.logger.warning("Could not fetch asset %s inline: %s", result.asset_id, exc)
        return {**metadata, "warning": warning}
    return [_image_block(asset), types.TextContent(type="text", text=to_json(metadata))]


GENERATE_DESCRIPTION = """Generate a professional, polished image (illustration, diagram, icon, or social-card).

Diagrams can be described in natural language, written as Mermaid/D2/Vega syntax in the prompt, or
passed verbatim with diagramCode + diagramFormat. Agents should prefer diagramCode + diagramFormat:
it bypasses AI styling, so the syntax you send is exactly what is rendered. Do not mix diagram syntax
and descriptive text in the prompt; put styling in stylePreferences, colors in brandColors and
project background in projectContext.

For charts use Vega-Lite JSON (diagramSyntax "vega").

Cropping: set autoCrop to trim transparent edges (autoCropPadding controls the margin), or give exact
pixel coordinates with cropX1/cropY1 (top-left) and cropX2/cropY2 (bottom-right)."""


@tool("generateImage", input_model=GenerateImageInput, description=GENERATE_DESCRIPTION)
async def generate_image(args: GenerateImageInput, ctx: HandlerContext):
    params = args.model_dump(by_alias=True, exclude_none=True)
    try:
        session, result = await ctx.image_agent.create_and_generate(params, app_id=ctx.credential)
    except DownstreamFailure as exc:
        return error_result(f"Error generating image: {exc}")

    if result.session_id is None:
        result = result.model_copy(update={"session_id": session.session_id})
    if result.succeeded:
        return await _with_inline_image(
            ctx, result, _metadata(result), warning="Image generated but could not be fetched inline"
        )
    return _compact(
        {"sessionId": session.session_id, "assetId": result.asset_id, "status": result.status, "error": result.error}
    )


ITERATE_DESCRIPTION = """Refine, modify, or create variations of an existing generated image.

Use this to edit specific parts of an image, apply style changes, fix issues, or crop to exact
coordinates. For diagram iterations include the original Mermaid/D2/Vega source in the prompt and be
explicit about visual problems (for example "the left edge is clipped")."""


@tool("iterateImage", input_model=IterateImageInput, description=ITERATE_DESCRIPTION)
async def iterate_image(args: IterateImageInput, ctx: HandlerContext):
    try:
        await ctx.image_agent.get_session(args.session_id, app_id=ctx.credential)
    except DownstreamFailure:
        return error_result(f"Session {args.session_id} not found")

    params = args.model_dump(by_alias=True, exclude_none=True, exclude={"session_id"})
    try:
        result = await ctx.image_agent.iterate(args.session_id, params, app_id=ctx.credential)
    except DownstreamFailure as exc:
        message = str(exc)
        return error_result(message, errorType=classify_error(message))

    if result.succeeded:
        return await _with_inline_image(
            ctx, result, _metadata(result), warning="Image iterated but could not be fetched inline"
        )
    return _metadata(result, error=result.error, errorType=classify_error(result.error))


INSPECT_DESCRIPTION = """Retrieve detailed information about an image generation session and all its assets.

Returns session metadata, every asset with its prompt, toolchain and status, and the parent-child
links that record iteration history. Use it to find asset IDs for iterateImage or exportImageAsset."""


@tool(
    "inspectImageSession",
    input_model=SessionInput,
    description=INSPECT_DESCRIPTION,
    annotations={"readOnlyHint": True},
)
async def inspect_image_session(args: SessionInput, ctx: HandlerContext):
    try:
        details = await ctx.image_agent.get_session(args.session_id, app_id=ctx.credential)
    except DownstreamFailure as exc:
        return error_result(f"Error inspecting session: {exc}")

    assets = [
        _compact(
            {
                "assetId": asset.asset_id,
                "parentAssetId": asset.parent_asset_id,
                "prompt": asset.prompt if len(asset.prompt) <= 100 else asset.prompt[:100] + "...",
                "kind": asset.kind,
                "toolchain": asset.toolchain,
                "status": asset.status,
                "createdAt": asset.created_at,
                "format": asset.format,
                "width": asset.width,
                "height": asset.height,
                "url": asset.url,
            }
        )
        for asset in details.assets
    ]
    summary = {
        "sessionId": details.session_id,
        "name": details.name,
        "createdAt": details.created_at,
        "updatedAt": details.updated_at,
        "status": details.status,
        "assetCount": details.asset_count or len(details.assets),
        "assets": assets,
    }
    return types.TextContent(type="text", text=to_json(summary, pretty=True))


EXPORT_DESCRIPTION = """Export a generated image asset by session and asset ID.

Returns the image inline as base64 along with metadata (format, dimensions, size). After generating
an image with generateImage, pass its sessionId and assetId."""


@tool(
    "exportImageAsset",
    input_model=AssetInput,
    description=EXPORT_DESCRIPTION,
    annotations={"readOnlyHint": True},
)
async def export_image_asset(args: AssetInput, ctx: HandlerContext):
    try:
        await ctx.image_agent.get_session(args.session_id, app_id=ctx.credential)
    except DownstreamFailure:
        return error_result(f"Session {args.session_id} not found", success=False)

    try:
        asset = await ctx.image_agent.get_asset_file(args.asset_id, app_id=ctx.credential)
    except DownstreamFailure as exc:
        return error_result(f"Error exporting asset: {exc}", success=False)

    match = _IMAGE_FORMAT.search(asset.content_type)
    return [
        _image_block(asset),
        types.TextContent(
            type="text",
            text=to_json(
                {
                    "success": True,
                    "assetId": args.asset_id,
                    "sessionId": args.session_id,
                    "size": len(asset.data),
                    "format": match.group(1).upper() if match else "UNKNOWN",
                }
            ),
        ),
    ]


IMAGE_TOOLS = (generate_image, iterate_image, inspect_image_session, export_image_asset)


__all__ = [
    "IMAGE_TOOLS",
    "AssetInput",
    "GenerateImageInput",
    "IterateImageInput",
    "SessionInput",
    "classify_error",
    "export_image_asset",
    "generate_image",
    "inspect_image_session",
    "iterate_image",
]
