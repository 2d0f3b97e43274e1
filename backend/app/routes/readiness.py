"""
Readiness API endpoint.

Provides the structured readiness report (the same data as
`packcheck validate --json` without a request).
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.dependencies import get_environment, get_settings
from config import PackcheckSettings
from host import HostEnvironment
from readiness import generate_readiness_report

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/readiness")
def get_readiness(
    env: HostEnvironment = Depends(get_environment),
    settings: PackcheckSettings = Depends(get_settings),
):
    """
    Run every probe and return the readiness report.

    Example Response:
        {
            "version": "0.1.0",
            "ready": false,
            "timestamp": "2026-01-05T10:00:00+00:00",
            "summary": {
                "total_checks": 11,
                "required_checks": 9,
                "passed": 9,
                "unmet": ["java_jdk"]
            },
            "checks": [
                {
                    "id": "dotnet_framework",
                    "label": ".NET Framework Developer Pack",
                    "required": true,
                    "status": "ok",
                    "detail": ".NET Framework 4.6.2+ (release 528040)"
                },
                ...
            ]
        }
    """
    try:
        report = generate_readiness_report(env, settings)
    except Exception as e:
        logger.exception("Readiness report failed")
        return JSONResponse(
            status_code=500,
            content={
                "version": "unknown",
                "ready": False,
                "error": str(e),
                "checks": [],
            },
        )
    return JSONResponse(content=report.to_dict())
