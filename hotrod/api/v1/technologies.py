"""
Technology catalog endpoints.
"""
from dataclasses import asdict

from fastapi import APIRouter, HTTPException

from hotrod.core.models import TechnologyDescriptor
from hotrod.sources.fcc_bdc.metadata import PROBE_TECHS, TECHNOLOGY_TYPES, get_technology

router = APIRouter(tags=["Technologies"])


def _describe(tech: TechnologyDescriptor) -> dict:
    return {**asdict(tech), "probed": tech.code in PROBE_TECHS}


@router.get("/technologies")
def list_technologies():
    """
    FCC technology codes with labels and overlay colors.

    ``probed`` marks the codes the hex tile endpoint accepts.
    """
    return {"technologies": [_describe(tech) for tech in TECHNOLOGY_TYPES]}


@router.get("/technologies/{code}")
def get_technology_by_code(code: str):
    """One catalog entry by FCC technology code."""
    tech = get_technology(code)
    if tech is None:
        raise HTTPException(status_code=404, detail=f"Unknown technology code: {code}")
    return _describe(tech)
