"""
FCC Form 477 data source adapter (FCC Open Data / Socrata).

Provides access to:
- Provider search and technology codes (Form 477 provider ids)
- State and county level deployment for a provider + technology

Data source:
- FCC Open Data: https://opendata.fcc.gov (dataset 4kuc-phrr, June 2020)

No API key required; an optional app token raises rate limits.

License: Public domain (U.S. government data)
"""

from hotrod.sources.fcc_form477.client import Form477Client

__all__ = ["Form477Client"]
