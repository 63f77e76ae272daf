"""
Pytest configuration and shared fixtures.
"""
import pytest
import mapbox_vector_tile

from hotrod.core.cache import TTLCache
from hotrod.core.config import Settings, reset_settings


class FakeClock:
    """Manually advanced time source for cache tests."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(scope="function")
def clean_env(monkeypatch):
    """
    Clean environment for testing.

    Removes all app-related env vars to ensure clean state.
    """
    env_vars = [
        "FCC_APP_TOKEN",
        "MAX_CONCURRENCY",
        "LOG_LEVEL",
        "RUN_INTEGRATION_TESTS",
        "COVERAGE_GRANULARITY",
        "HEX_ZOOM",
        "BDC_PROCESS_UUID",
        "COVERAGE_TTL",
    ]
    for var in env_vars:
        monkeypatch.delenv(var, raising=False)

    # Reset settings singleton
    reset_settings()

    yield

    # Reset again after test
    reset_settings()


@pytest.fixture
def settings(clean_env):
    """Default settings, ignoring any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    """Fresh cache driven by the fake clock."""
    return TTLCache(clock=clock)


def build_tile(features, layer_name="fixedproviderhex", extent=4096):
    """
    Encode a vector tile.

    Args:
        features: Dicts with "geometry" (WKT in tile coordinates, y down),
            optional "properties" and "id"
    """
    layer = {
        "name": layer_name,
        "features": [
            {
                "geometry": f["geometry"],
                "properties": f.get("properties", {}),
                **({"id": f["id"]} if "id" in f else {}),
            }
            for f in features
        ],
    }
    return mapbox_vector_tile.encode(
        [layer],
        default_options={"y_coord_down": True, "extents": extent},
    )


def hexagon_wkt(cx: int, cy: int, r: int = 100) -> str:
    """A closed hexagon-ish polygon in tile coordinates."""
    points = [
        (cx - r, cy), (cx - r // 2, cy - r), (cx + r // 2, cy - r),
        (cx + r, cy), (cx + r // 2, cy + r), (cx - r // 2, cy + r),
    ]
    points.append(points[0])
    return "POLYGON ((" + ", ".join(f"{x} {y}" for x, y in points) + "))"


@pytest.fixture
def tile_builder():
    return build_tile


@pytest.fixture
def hexagon():
    return hexagon_wkt
