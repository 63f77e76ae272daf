"""
Response schemas for the FCC BDC map API.

Rows are validated one at a time so a single bad row is dropped instead of
failing the whole response.
"""
import logging
from typing import Any, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


class BDCEnvelope(BaseModel):
    """Wrapper every BDC JSON endpoint returns."""
    status: str
    message: Optional[str] = None
    data: Optional[List[Any]] = Field(default=None)

    @property
    def successful(self) -> bool:
        return self.status == "successful"


class BDCProviderRow(BaseModel):
    """One hit of /provider/list."""
    provider_id: str
    provider_name: str

    @field_validator("provider_id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        if v is None or isinstance(v, bool):
            raise ValueError("provider_id is required")
        v = str(v).strip()
        if not v:
            raise ValueError("provider_id is empty")
        return v

    @field_validator("provider_name", mode="before")
    @classmethod
    def coerce_name(cls, v: Any) -> str:
        if v is None:
            raise ValueError("provider_name is required")
        return str(v).strip()


def parse_provider_rows(rows: List[Any]) -> List[BDCProviderRow]:
    """Validate provider rows, skipping malformed ones."""
    parsed = []
    for row in rows:
        try:
            parsed.append(BDCProviderRow.model_validate(row))
        except ValidationError as e:
            logger.debug(f"Skipping malformed BDC provider row {row!r}: {e.error_count()} errors")
    return parsed
