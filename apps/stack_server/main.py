"""FastAPI server exposing the point stacker as an HTTP action."""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from pointstack import ConfigurationError, StackingError

from .schemas.models import StackPointsRequest, StackPointsResponse
from .tools.stacking import build_config, run_stacking

logger = logging.getLogger(__name__)

app = FastAPI(title="Point Stacker Server", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check() -> Dict[str, str]:
    return {"status": "ok"}


@app.post("/actions/stack_points")
async def stack_points_action(request: StackPointsRequest) -> Dict[str, Any]:
    try:
        config = build_config(request)
    except FileNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ConfigurationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    try:
        result, summary = run_stacking(request, config)
    except ConfigurationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except StackingError as exc:
        logger.error("Stacking failed: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    response = StackPointsResponse(result=result, diagnostics=summary)
    return response.model_dump(by_alias=True)
