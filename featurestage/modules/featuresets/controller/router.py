"""FastAPI routes triggering feature-set staging runs."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, ConfigDict, ValidationError

from featurestage.modules.featuresets.service.manager import FeatureSetsStagingService

router = APIRouter(prefix="/featuresets", tags=["featuresets"])


class StageOptionsBody(BaseModel):
    """Per-request overrides of the staging settings; unset fields keep the configured value."""

    model_config = ConfigDict(extra="forbid")

    stage_directory: Optional[str] = None
    copy_types: Optional[str] = None
    copy_excludes: Optional[List[str]] = None
    unpack_types: Optional[str] = None
    unpack_excludes: Optional[List[str]] = None
    includes: Optional[str] = None
    excludes: Optional[str] = None
    include_scope: Optional[str] = None
    exclude_scope: Optional[str] = None
    include_scope_empty_means_all: Optional[bool] = None
    featureset_groupid_includes: Optional[List[str]] = None
    mappings: Optional[List[Dict[str, Any]]] = None
    skip: Optional[bool] = None
    sort_resolved: Optional[bool] = None


def _describe(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )


def get_service(request: Request) -> FeatureSetsStagingService:
    container = getattr(request.app.state, "container", None)
    if not container or not getattr(container, "staging_service", None):
        raise HTTPException(status_code=500, detail="Staging service not initialized.")
    return container.staging_service


@router.post("/stage")
async def stage(payload: Dict[str, Any], svc: FeatureSetsStagingService = Depends(get_service)):
    project = payload.get("project")
    if not isinstance(project, dict):
        raise HTTPException(status_code=400, detail="project must be a JSON object")
    options = payload.get("options") or {}
    if not isinstance(options, dict):
        raise HTTPException(status_code=400, detail="options must be a JSON object")
    try:
        overrides = StageOptionsBody.model_validate(options)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=f"invalid options: {_describe(exc)}") from exc

    result = svc.stage_request(project, overrides.model_dump(exclude_none=True))
    if not result.ok:
        raise HTTPException(status_code=result.status_code, detail=result.message)
    return result.as_dict()
