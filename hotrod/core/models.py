"""
Domain types for the coverage pipeline.

All values are immutable: a re-fetch produces a new object instead of
mutating the old one, so callers can hold results across cache refreshes.
"""
import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple


# =============================================================================
# ENUMS
# =============================================================================

class SourceScheme(str, Enum):
    """Which upstream ID space a provider identifier belongs to."""
    PRIMARY = "primary"  # FCC BDC ids (hex tile service)
    SECONDARY = "secondary"  # Form 477 ids (Socrata tabular service)


class CoverageSource(str, Enum):
    """Fidelity tier that produced a coverage result."""
    HEX = "hex"
    STATE = "state"
    COUNTY = "county"


class FetchStatus(str, Enum):
    """Outcome tag of a single upstream sub-fetch."""
    SUCCESS = "success"
    EMPTY = "empty"
    FAILED = "failed"


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class ProviderIdentity:
    """A provider as known in one upstream's ID scheme."""
    id: str
    name: str
    source_scheme: SourceScheme = SourceScheme.PRIMARY
    resolved_from_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"id": self.id, "name": self.name, "source_scheme": self.source_scheme.value}
        if self.resolved_from_id is not None:
            data["resolved_from_id"] = self.resolved_from_id
        return data


@dataclass(frozen=True)
class TechnologyDescriptor:
    """One entry of the fixed technology catalog."""
    code: str
    label: str
    short_label: str
    color: str  # "#rrggbb"


@dataclass(frozen=True)
class FetchOutcome:
    """
    Result of one upstream sub-fetch.

    Fan-out code branches on ``status`` rather than on exceptions, so a
    failed tile and an empty tile stay distinguishable all the way up.
    """
    status: FetchStatus
    data: Any = None
    cause: Optional[str] = None

    @classmethod
    def success(cls, data: Any) -> "FetchOutcome":
        return cls(FetchStatus.SUCCESS, data=data)

    @classmethod
    def empty(cls) -> "FetchOutcome":
        return cls(FetchStatus.EMPTY)

    @classmethod
    def failed(cls, cause: str) -> "FetchOutcome":
        return cls(FetchStatus.FAILED, cause=cause)

    @property
    def ok(self) -> bool:
        return self.status == FetchStatus.SUCCESS

    @property
    def has_data(self) -> bool:
        """True for a successful fetch that carried a non-empty payload."""
        return self.ok and bool(self.data)


def _first_position(coordinates: Any) -> Optional[Tuple[float, float]]:
    """Descend nested GeoJSON coordinate arrays to the first [lon, lat] pair."""
    node = coordinates
    while isinstance(node, (list, tuple)) and node:
        head = node[0]
        if isinstance(head, (int, float)) and not isinstance(head, bool):
            if len(node) >= 2 and isinstance(node[1], (int, float)):
                return float(node[0]), float(node[1])
            return None
        node = head
    return None


@dataclass(frozen=True)
class GeometryRecord:
    """
    A single decoded shape plus its properties.

    ``geometry`` is a GeoJSON geometry object in lon/lat.
    """
    geometry: Dict[str, Any]
    properties: Dict[str, Any] = field(default_factory=dict)

    # Property names carrying a stable per-shape identifier, in priority order
    ID_PROPERTIES = ("h3index", "featureId")

    def feature_id(self) -> Optional[str]:
        for name in self.ID_PROPERTIES:
            value = self.properties.get(name)
            if value not in (None, ""):
                return str(value)
        return None

    def first_coordinate(self) -> Optional[Tuple[float, float]]:
        return _first_position(self.geometry.get("coordinates"))

    def dedupe_key(self, precision: int = 4) -> Optional[str]:
        """
        Key used to recognise the same shape emitted by adjacent tiles.

        Prefers the stable feature id; otherwise the first vertex rounded to
        ``precision`` decimals. None when neither is available.
        """
        feature_id = self.feature_id()
        if feature_id is not None:
            return feature_id
        coord = self.first_coordinate()
        if coord is None:
            return None
        return f"{coord[0]:.{precision}f},{coord[1]:.{precision}f}"

    def to_feature(self) -> Dict[str, Any]:
        return {
            "type": "Feature",
            "geometry": self.geometry,
            "properties": dict(self.properties),
        }


@dataclass(frozen=True)
class CoverageMeta:
    """Metadata attached to a coverage result."""
    unit_count: int
    data_date: Optional[str] = None
    tiles_with_data: Optional[int] = None
    tiles_empty: Optional[int] = None
    tiles_errored: Optional[int] = None
    truncated: bool = False  # tabular rows capped before they ran out

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"unitCount": self.unit_count, "dataDate": self.data_date}
        if self.tiles_with_data is not None:
            data["tiles"] = {
                "withData": self.tiles_with_data,
                "empty": self.tiles_empty,
                "errored": self.tiles_errored,
            }
        if self.truncated:
            data["truncated"] = True
        return data


@dataclass(frozen=True)
class CoverageResult:
    """
    Merged coverage for one (provider, technology) pair.

    ``unit_count`` always equals the number of features, and a HEX result
    always carries at least one feature. Features are copied on the way in
    and on the way out, so a cached result never shares dicts with callers.
    """
    features: Tuple[Dict[str, Any], ...]
    source: CoverageSource
    meta: CoverageMeta

    def __post_init__(self):
        if self.meta.unit_count != len(self.features):
            raise ValueError(
                f"unit_count={self.meta.unit_count} does not match "
                f"{len(self.features)} features"
            )
        if self.source == CoverageSource.HEX and not self.features:
            raise ValueError("A hex coverage result must contain geometry")

    @classmethod
    def build(
        cls,
        features: Iterable[Dict[str, Any]],
        source: CoverageSource,
        data_date: Optional[str] = None,
        **meta_fields: Any,
    ) -> "CoverageResult":
        features = tuple(copy.deepcopy(feature) for feature in features)
        return cls(
            features=features,
            source=source,
            meta=CoverageMeta(unit_count=len(features), data_date=data_date, **meta_fields),
        )

    @property
    def is_empty(self) -> bool:
        return self.meta.unit_count == 0

    def to_geojson(self) -> Dict[str, Any]:
        return {
            "type": "FeatureCollection",
            "features": copy.deepcopy(list(self.features)),
            "source": self.source.value,
            "meta": self.meta.to_dict(),
        }


@dataclass(frozen=True)
class ProviderTechnologies:
    """Technologies offered by a provider and where that answer came from."""
    technologies: Tuple[str, ...]
    source: str  # "bdc", "bdc_resolved" or "form477"
    provider_id: str
    provider_name: Optional[str] = None
    resolved_from_provider_id: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "technologies", tuple(self.technologies))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "technologies": list(self.technologies),
            "source": self.source,
            "providerId": self.provider_id,
        }
        if self.provider_name is not None:
            data["providerName"] = self.provider_name
        if self.resolved_from_provider_id is not None:
            data["resolvedFromProviderId"] = self.resolved_from_provider_id
        return data
