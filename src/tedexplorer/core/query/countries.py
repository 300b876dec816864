"""
Country code aliases.

Search filters and the metadata list use two-letter codes, while the
Publications Office country authority names its IRIs with three-letter
codes (``.../authority/country/DEU``). A country filter matches either form.
"""

from __future__ import annotations

AUTHORITY_COUNTRY_CODES = {
    "AT": "AUT",
    "BE": "BEL",
    "BG": "BGR",
    "CY": "CYP",
    "CZ": "CZE",
    "DE": "DEU",
    "DK": "DNK",
    "EE": "EST",
    "EL": "GRC",
    "ES": "ESP",
    "FI": "FIN",
    "FR": "FRA",
    "GR": "GRC",
    "HR": "HRV",
    "HU": "HUN",
    "IE": "IRL",
    "IT": "ITA",
    "LT": "LTU",
    "LU": "LUX",
    "LV": "LVA",
    "MT": "MLT",
    "NL": "NLD",
    "PL": "POL",
    "PT": "PRT",
    "RO": "ROU",
    "SE": "SWE",
    "SI": "SVN",
    "SK": "SVK",
    # EEA, Switzerland and the United Kingdom also publish on TED
    "CH": "CHE",
    "GB": "GBR",
    "IS": "ISL",
    "LI": "LIE",
    "NO": "NOR",
    "UK": "GBR",
}


def country_code_aliases(code: str) -> tuple[str, ...]:
    """Every upper-case code naming the same country as ``code``.

    The given code comes first. Unknown codes alias only themselves.

    Example:
        >>> country_code_aliases("de")
        ('DE', 'DEU')
        >>> country_code_aliases("GRC")
        ('GRC', 'EL', 'GR')
    """
    code = code.strip().upper()
    aliases = [code]
    if code in AUTHORITY_COUNTRY_CODES:
        aliases.append(AUTHORITY_COUNTRY_CODES[code])
    else:
        aliases.extend(sorted(k for k, v in AUTHORITY_COUNTRY_CODES.items() if v == code))
    return tuple(aliases)
