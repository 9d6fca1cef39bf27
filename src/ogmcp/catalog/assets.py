# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Generated image assets as readable resources."""

from __future__ import annotations

from collections.abc import Mapping

from ..resource_template import UUID_PATTERN, ResourcePayload, resource_template
from ..tool import HandlerContext


ASSET_URI_TEMPLATE = "asset://{sessionId}/{assetId}"


@resource_template(
    ASSET_URI_TEMPLATE,
    name="Generated Image Asset",
    description="Access generated image assets by session and asset ID. Use inspectImageSession to find asset IDs.",
    mime_type="image/png",
    patterns={"sessionId": UUID_PATTERN, "assetId": UUID_PATTERN},
    pattern_error="Invalid session ID or asset ID format - must be valid UUIDs",
)
async def read_asset(params: Mapping[str, str], ctx: HandlerContext) -> ResourcePayload:
    # Assets are addressed globally by id; the session id only scopes the URI.
    asset = await ctx.image_agent.get_asset_file(params["assetId"], app_id=ctx.credential)
    return ResourcePayload(data=asset.data, mime_type=asset.content_type)


RESOURCE_TEMPLATES = (read_asset,)


__all__ = ["ASSET_URI_TEMPLATE", "RESOURCE_TEMPLATES", "read_asset"]
