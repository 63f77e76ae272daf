"""
FCC Broadband Data Collection (BDC) data source adapter.

Provides access to:
- Provider search by name (BDC provider ids)
- Provider hex coverage as vector tiles
- The fixed technology catalog

Data source:
- FCC National Broadband Map: https://broadbandmap.fcc.gov

No API key required for public datasets.

License: Public domain (U.S. government data)
"""

from hotrod.sources.fcc_bdc.client import FCCBDCClient
from hotrod.sources.fcc_bdc import metadata

__all__ = ["FCCBDCClient", "metadata"]
