"""
US state / county reference boundaries (us-atlas TopoJSON).

Data source:
- https://github.com/topojson/us-atlas (Census cartographic boundary files)
"""

from hotrod.sources.boundaries.client import BoundaryClient

__all__ = ["BoundaryClient"]
