"""
Coverage pipeline services.

- TechProber: technologies for a BDC provider id via sample tiles
- NameResolver: Form 477 provider name -> BDC identity
- CoverageAggregator: hex tiles with Form 477 state/county fallback
- ProviderService: provider search and technology resolution
- BoundaryService: state / county boundary polygons by FIPS
"""

from hotrod.services.boundary_service import BoundaryService
from hotrod.services.container import ServiceContainer
from hotrod.services.coverage_aggregator import CoverageAggregator
from hotrod.services.name_resolver import NameResolver
from hotrod.services.provider_service import ProviderService
from hotrod.services.tech_prober import TechProber

__all__ = [
    "BoundaryService",
    "CoverageAggregator",
    "NameResolver",
    "ProviderService",
    "ServiceContainer",
    "TechProber",
]
