"""Idea validation endpoints for the FastAPI backend."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

from ..errors import ProviderError
from ..pipeline import ValidationPipeline
from ..schemas import ChatRequest, ChatResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])

ERROR_PREFIX = "Error communicating with APIs: "


def _pipeline(request: Request) -> ValidationPipeline:
    return request.app.state.pipeline


@router.get("/health")
async def healthcheck(request: Request) -> dict[str, str]:
    """Simple health check endpoint that also reports the execution mode."""

    return {"status": "ok", "mode": _pipeline(request).mode.value}


@router.get("/schemas")
async def list_schemas(request: Request) -> dict[str, object]:
    """Expose the structured-output contracts in use."""

    schemas = _pipeline(request).schemas
    return {"version": schemas.version, "schemas": schemas.names()}


@router.post("/chat", response_model=ChatResponse)
async def chat(payload: ChatRequest, request: Request):
    """Validate a startup idea and return the composed analysis."""

    try:
        result = await _pipeline(request).run(payload)
    except ProviderError as exc:
        logger.error("API call failed: %s", exc.details())
        return PlainTextResponse(ERROR_PREFIX + exc.message, status_code=500)
    except Exception as exc:
        logger.exception("Unexpected pipeline failure")
        return PlainTextResponse(ERROR_PREFIX + (str(exc) or "Unknown error"), status_code=500)
    return ChatResponse(reply=result.reply)
