"""
Packaging plan endpoint.

POST /api/packaging/plan runs the full pipeline for one request:
probes, engine lookup, certification and command synthesis. Gate
failures (not ready, no engine, not certified) are normal outcomes and
return 200 with the outcome status; invalid input returns 422.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict

from app.dependencies import get_environment, get_settings
from config import PackcheckSettings
from host import HostEnvironment
from synthesis import InputInvalid, OutcomeStatus, PackagingRequest, run_validation

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/packaging", tags=["packaging"])


class PackagingPlanRequest(BaseModel):
    """Request body for a packaging plan."""

    model_config = ConfigDict(extra="forbid")

    project_file: str
    """Path to the .uproject file (on the API host)."""

    output_dir: str
    """Archive directory; created if missing."""

    platform: Optional[str] = None
    """Android (default) or Linux, case-insensitive."""

    write_script: bool = False
    """Write Package_<project>_<Platform> and create output_dir; False only checks them."""


@router.post("/plan")
def plan_packaging(
    body: PackagingPlanRequest,
    env: HostEnvironment = Depends(get_environment),
    settings: PackcheckSettings = Depends(get_settings),
):
    try:
        request = PackagingRequest.from_arguments(body.project_file, body.output_dir, body.platform)
    except InputInvalid as e:
        raise HTTPException(status_code=422, detail=e.message)

    outcome = run_validation(env, settings, request=request, write_script=body.write_script)
    if outcome.status == OutcomeStatus.INPUT_INVALID:
        raise HTTPException(status_code=422, detail=outcome.message)

    logger.info("Packaging plan for %s: %s", request.project_name, outcome.status.value)
    return JSONResponse(content=outcome.to_dict())
