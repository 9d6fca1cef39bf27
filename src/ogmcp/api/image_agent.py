# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Client for the OpenGraph image agent.

The agent groups generated assets into sessions. A generation creates a new
asset; an iteration derives a child asset from an existing one. Asset files
are served as raw bytes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import DownstreamFailure
from ._http import decode_json, send


DEFAULT_ASSET_MIME_TYPE = "image/png"


class _AgentModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class Usage(_AgentModel):
    total_input_tokens: int | None = Field(default=None, alias="totalInputTokens")
    total_output_tokens: int | None = Field(default=None, alias="totalOutputTokens")
    total_cost: float | None = Field(default=None, alias="totalCost")


class AgentSession(_AgentModel):
    session_id: str = Field(alias="sessionId")
    name: str | None = None
    created_at: str | None = Field(default=None, alias="createdAt")


class GenerateResult(_AgentModel):
    session_id: str | None = Field(default=None, alias="sessionId")
    asset_id: str | None = Field(default=None, alias="assetId")
    status: str
    format: str | None = None
    width: int | None = None
    height: int | None = None
    url: str | None = None
    error: str | None = None
    usage: Usage | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == "succeeded" and bool(self.asset_id)


class IterateResult(GenerateResult):
    parent_asset_id: str | None = Field(default=None, alias="parentAssetId")


class AssetInfo(_AgentModel):
    asset_id: str = Field(alias="assetId")
    session_id: str | None = Field(default=None, alias="sessionId")
    parent_asset_id: str | None = Field(default=None, alias="parentAssetId")
    prompt: str = ""
    kind: str | None = None
    toolchain: str | None = None
    status: str | None = None
    created_at: str | None = Field(default=None, alias="createdAt")
    completed_at: str | None = Field(default=None, alias="completedAt")
    format: str | None = None
    width: int | None = None
    height: int | None = None
    url: str | None = None
    error: str | None = None


class SessionDetails(_AgentModel):
    session_id: str = Field(alias="sessionId")
    name: str | None = None
    created_at: str | None = Field(default=None, alias="createdAt")
    updated_at: str | None = Field(default=None, alias="updatedAt")
    status: str | None = None
    asset_count: int | None = Field(default=None, alias="assetCount")
    assets: list[AssetInfo] = Field(default_factory=list)


@dataclass(frozen=True, slots=True)
class AssetFile:
    data: bytes
    content_type: str = DEFAULT_ASSET_MIME_TYPE


class ImageAgentClient:
    def __init__(self, http: httpx.AsyncClient, *, base_url: str, default_app_id: str | None = None) -> None:
        self._http = http
        self._base_url = base_url.rstrip("/")
        self._default_app_id = default_app_id

    async def create_session(self, name: str | None = None, *, app_id: str | None = None) -> AgentSession:
        payload = await self._json("POST", "/sessions", action="create session", app_id=app_id, json={"name": name})
        return _parse(AgentSession, payload, action="create session")

    async def generate(self, session_id: str, params: dict[str, Any], *, app_id: str | None = None) -> GenerateResult:
        payload = await self._json(
            "POST", f"/sessions/{session_id}/generate", action="generate image", app_id=app_id, json=params
        )
        return _parse(GenerateResult, payload, action="generate image")

    async def iterate(self, session_id: str, params: dict[str, Any], *, app_id: str | None = None) -> IterateResult:
        payload = await self._json(
            "POST", f"/sessions/{session_id}/iterate", action="iterate image", app_id=app_id, json=params
        )
        return _parse(IterateResult, payload, action="iterate image")

    async def get_session(self, session_id: str, *, app_id: str | None = None) -> SessionDetails:
        payload = await self._json("GET", f"/sessions/{session_id}", action="get session", app_id=app_id)
        return _parse(SessionDetails, payload, action="get session")

    async def get_asset_file(self, asset_id: str, *, app_id: str | None = None) -> AssetFile:
        response = await send(
            self._http,
            "GET",
            f"{self._base_url}/assets/{asset_id}/file",
            params=self._params(app_id),
            headers=_HEADERS,
            action="get asset file",
        )
        content_type = response.headers.get("content-type") or DEFAULT_ASSET_MIME_TYPE
        return AssetFile(data=response.content, content_type=content_type.split(";")[0].strip())

    async def create_and_generate(
        self, params: dict[str, Any], *, session_name: str | None = None, app_id: str | None = None
    ) -> tuple[AgentSession, GenerateResult]:
        session = await self.create_session(session_name, app_id=app_id)
        result = await self.generate(session.session_id, params, app_id=app_id)
        return session, result

    async def _json(self, method: str, path: str, *, action: str, app_id: str | None, **kwargs: Any) -> Any:
        response = await send(
            self._http,
            method,
            f"{self._base_url}{path}",
            params=self._params(app_id),
            headers=_HEADERS,
            action=action,
            **kwargs,
        )
        return decode_json(response, action=action)

    def _params(self, app_id: str | None) -> dict[str, str]:
        resolved = app_id or self._default_app_id
        return {"app_id": resolved} if resolved else {}


_HEADERS = {"Content-Type": "application/json", "Referrer": "mcp"}


def _parse(model: type[_AgentModel], payload: Any, *, action: str) -> Any:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise DownstreamFailure(f"Failed to {action}: unexpected response shape") from exc


__all__ = [
    "AgentSession",
    "AssetFile",
    "AssetInfo",
    "GenerateResult",
    "ImageAgentClient",
    "IterateResult",
    "SessionDetails",
]
