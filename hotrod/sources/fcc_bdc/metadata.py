"""
FCC technology catalog and geography reference tables.

Handles:
- The fixed technology catalog (code -> label, short label, overlay color)
- Which technology codes the BDC hex tile endpoint accepts
- State abbreviation -> 2-digit FIPS mapping
"""

from typing import Dict, Iterable, List, Optional

from hotrod.core.models import TechnologyDescriptor


# ========== Technology catalog ==========

TECHNOLOGY_TYPES: List[TechnologyDescriptor] = [
    TechnologyDescriptor("10", "Asymmetric DSL", "ADSL", "#a78bfa"),
    TechnologyDescriptor("11", "ADSL2/ADSL2+", "ADSL2", "#8b5cf6"),
    TechnologyDescriptor("12", "ADSL2/ADSL2+", "ADSL2+", "#7c3aed"),
    TechnologyDescriptor("20", "Symmetric DSL", "SDSL", "#6d28d9"),
    TechnologyDescriptor("30", "Other DSL", "DSL", "#5b21b6"),
    TechnologyDescriptor("40", "Cable HFC", "Cable", "#f59e0b"),
    TechnologyDescriptor("41", "Cable - DOCSIS 3.0+", "DOCSIS 3+", "#d97706"),
    TechnologyDescriptor("43", "Cable - DOCSIS 3.1", "DOCSIS 3.1", "#b45309"),
    TechnologyDescriptor("50", "Fiber to the Premises", "Fiber", "#10b981"),
    TechnologyDescriptor("60", "Satellite", "Satellite", "#3b82f6"),
    TechnologyDescriptor("70", "Terrestrial Fixed Wireless", "Fixed Wireless", "#06b6d4"),
    TechnologyDescriptor("90", "Electric Power Line", "Power Line", "#84cc16"),
    TechnologyDescriptor("0", "Other", "Other", "#6b7280"),
]

TECH_BY_CODE: Dict[str, TechnologyDescriptor] = {t.code: t for t in TECHNOLOGY_TYPES}

# Parent codes accepted by the BDC hex tile endpoint. DOCSIS sub-codes (41, 43),
# 5G NR (300) and the DSL variants (11, 12, 20, 30) all come back HTTP 422.
PROBE_TECHS = ("10", "40", "50", "60", "70")


def get_technology(code: str) -> Optional[TechnologyDescriptor]:
    """Look up a catalog entry by technology code."""
    return TECH_BY_CODE.get(str(code).strip())


def sort_tech_codes(codes: Iterable[str]) -> List[str]:
    """Numeric ascending order, non-numeric codes last."""
    def key(code: str):
        try:
            return (0, int(code), code)
        except (TypeError, ValueError):
            return (1, 0, str(code))

    return sorted(codes, key=key)


# ========== Geography ==========

# State / territory FIPS codes as used by the us-atlas boundary ids
STATE_FIPS = {
    "AL": "01", "AK": "02", "AZ": "04", "AR": "05", "CA": "06",
    "CO": "08", "CT": "09", "DE": "10", "DC": "11", "FL": "12",
    "GA": "13", "HI": "15", "ID": "16", "IL": "17", "IN": "18",
    "IA": "19", "KS": "20", "KY": "21", "LA": "22", "ME": "23",
    "MD": "24", "MA": "25", "MI": "26", "MN": "27", "MS": "28",
    "MO": "29", "MT": "30", "NE": "31", "NV": "32", "NH": "33",
    "NJ": "34", "NM": "35", "NY": "36", "NC": "37", "ND": "38",
    "OH": "39", "OK": "40", "OR": "41", "PA": "42", "RI": "44",
    "SC": "45", "SD": "46", "TN": "47", "TX": "48", "UT": "49",
    "VT": "50", "VA": "51", "WA": "53", "WV": "54", "WI": "55",
    "WY": "56", "AS": "60", "GU": "66", "MP": "69", "PR": "72",
    "VI": "78",
}


def state_fips(abbr: Optional[str]) -> Optional[str]:
    """2-digit FIPS for a state abbreviation, None if unknown."""
    if not abbr:
        return None
    return STATE_FIPS.get(abbr.strip().upper())
