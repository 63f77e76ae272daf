"""
Row schemas for the Form 477 fixed broadband deployment dataset (Socrata).

Socrata returns every column as a string; these models normalise the few
columns the coverage pipeline reads and reject rows missing them.
"""
import logging
from typing import Any, List, Type, TypeVar

from pydantic import BaseModel, ValidationError, field_validator

logger = logging.getLogger(__name__)

RowT = TypeVar("RowT", bound=BaseModel)


def _required_str(v: Any) -> str:
    if v is None or isinstance(v, (bool, dict, list)):
        raise ValueError("value is required")
    v = str(v).strip()
    if not v:
        raise ValueError("value is empty")
    return v


class ProviderRow(BaseModel):
    provider_id: str
    providername: str = ""

    @field_validator("provider_id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        return _required_str(v)

    @field_validator("providername", mode="before")
    @classmethod
    def coerce_name(cls, v: Any) -> str:
        return "" if v is None else str(v).strip()


class TechRow(BaseModel):
    techcode: str

    @field_validator("techcode", mode="before")
    @classmethod
    def coerce_code(cls, v: Any) -> str:
        return _required_str(v)


class StateRow(BaseModel):
    stateabbr: str

    @field_validator("stateabbr", mode="before")
    @classmethod
    def coerce_abbr(cls, v: Any) -> str:
        return _required_str(v).upper()


class BlockRow(BaseModel):
    """A census block row; the first 5 digits of the block code are the county FIPS."""
    blockcode: str

    @field_validator("blockcode", mode="before")
    @classmethod
    def coerce_block(cls, v: Any) -> str:
        v = _required_str(v)
        if not v.isdigit() or len(v) < 5:
            raise ValueError(f"not a census block code: {v!r}")
        return v

    @property
    def county_fips(self) -> str:
        return self.blockcode[:5]


def parse_rows(rows: Any, model: Type[RowT]) -> List[RowT]:
    """Validate rows against ``model``, skipping malformed ones."""
    if not isinstance(rows, list):
        return []
    parsed: List[RowT] = []
    skipped = 0
    for row in rows:
        try:
            parsed.append(model.model_validate(row))
        except ValidationError:
            skipped += 1
    if skipped:
        logger.debug(f"Skipped {skipped} malformed {model.__name__} rows")
    return parsed
