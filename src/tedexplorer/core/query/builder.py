"""
SPARQL query generation for TED notice searches.

Turns SearchFilters into a count query or a paged data query. Every
caller-supplied value passes through ``escape_literal`` before it is
placed inside a string literal.
"""

from __future__ import annotations

from .countries import country_code_aliases
from .models import NoticeType, SearchFilters, page_window

PREFIXES = """\
PREFIX rdfs: <http://www.w3.org/2000/01/rdf-schema#>
PREFIX dct: <http://purl.org/dc/terms/>
PREFIX xsd: <http://www.w3.org/2001/XMLSchema#>"""

# Class IRI fragments identifying each notice stage
TYPE_PATTERNS = {
    NoticeType.NOTICE: "ContractNotice",
    NoticeType.TENDER: "ContractAward",
}

RESULT_VARIABLES = (
    "notice",
    "title",
    "date",
    "cpvCode",
    "cpvDescription",
    "country",
    "countryName",
    "type",
)

COUNT_VARIABLE = "total"

_LITERAL_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "'": "\\'",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\b": "\\b",
    "\f": "\\f",
}


def escape_literal(value: str) -> str:
    """Escape a value for use inside a double-quoted SPARQL string literal.

    Other control characters are dropped; SPARQL has no escape for them.
    """
    out = []
    for ch in value:
        if ch in _LITERAL_ESCAPES:
            out.append(_LITERAL_ESCAPES[ch])
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            continue
        else:
            out.append(ch)
    return "".join(out)


def _literal(value: str) -> str:
    return f'"{escape_literal(value)}"'


def _trailing_segment(var: str) -> str:
    """Expression reducing an IRI variable to its last path segment."""
    return f'REPLACE(STR(?{var}), "^.*[/#]", "")'


def _where_pattern() -> list[str]:
    type_bind = (
        "BIND(\n"
        f'    IF(CONTAINS(STR(?noticeType), "{TYPE_PATTERNS[NoticeType.NOTICE]}"), '
        f'"{NoticeType.NOTICE.value}",\n'
        f'    IF(CONTAINS(STR(?noticeType), "{TYPE_PATTERNS[NoticeType.TENDER]}"), '
        f'"{NoticeType.TENDER.value}", "{NoticeType.OTHER.value}"))\n'
        "    AS ?type\n"
        "  )"
    )
    return [
        "?notice a ?noticeType ;",
        "        rdfs:label ?title ;",
        "        dct:issued ?date .",
        "OPTIONAL {",
        "  { ?notice ?hasCpv ?cpvCode . }",
        "  UNION",
        "  { ?notice ?hasTender ?linkedTender . ?linkedTender ?hasCpv ?cpvCode . }",
        "  ?cpvCode rdfs:label ?cpvDescription .",
        "}",
        "OPTIONAL {",
        "  { ?notice ?hasCountry ?country . }",
        "  UNION",
        "  { ?notice ?hasTender ?countryTender . ?countryTender ?hasCountry ?country . }",
        "  ?country rdfs:label ?countryName .",
        "}",
        type_bind,
    ]


def build_filter_clauses(filters: SearchFilters) -> list[str]:
    """One FILTER clause per constraint present in ``filters``."""
    clauses: list[str] = []

    if filters.keywords:
        clauses.append(
            f"FILTER(CONTAINS(LCASE(STR(?title)), LCASE({_literal(filters.keywords)})))"
        )

    if filters.type:
        pattern = TYPE_PATTERNS[NoticeType(filters.type)]
        clauses.append(f'FILTER(CONTAINS(STR(?noticeType), "{pattern}"))')

    if filters.date_from:
        clauses.append(f'FILTER(?date >= "{filters.date_from.isoformat()}"^^xsd:date)')

    if filters.date_to:
        clauses.append(f'FILTER(?date <= "{filters.date_to.isoformat()}"^^xsd:date)')

    if filters.cpv_code:
        clauses.append(
            f"FILTER(STRSTARTS({_trailing_segment('cpvCode')}, {_literal(filters.cpv_code)}))"
        )

    if filters.country:
        codes = country_code_aliases(filters.country)
        segment = f"UCASE({_trailing_segment('country')})"
        if len(codes) == 1:
            clauses.append(f"FILTER({segment} = {_literal(codes[0])})")
        else:
            options = ", ".join(_literal(code) for code in codes)
            clauses.append(f"FILTER({segment} IN ({options}))")

    return clauses


def build_query(filters: SearchFilters, count_only: bool = False) -> str:
    """Build the count or data query for ``filters``.

    The data form is ordered by publication date, newest first, and carries
    no LIMIT/OFFSET; use ``paginate`` or ``build_data_query`` for that. The
    count form counts the rows of the same DISTINCT projection, so the total
    always covers every page of the data form.
    """
    projection = "SELECT DISTINCT " + " ".join(f"?{v}" for v in RESULT_VARIABLES)
    body = _where_pattern() + build_filter_clauses(filters)

    if count_only:
        lines = [
            PREFIXES,
            f"SELECT (COUNT(*) AS ?{COUNT_VARIABLE})",
            "WHERE {",
            f"  {projection}",
            "  WHERE {",
        ]
        lines.extend(f"    {line}" for line in body)
        lines.extend(["  }", "}"])
        return "\n".join(lines)

    lines = [PREFIXES, projection, "WHERE {"]
    lines.extend(f"  {line}" for line in body)
    lines.append("}")
    lines.append("ORDER BY DESC(?date)")
    return "\n".join(lines)


def paginate(query: str, page: int, page_size: int) -> str:
    """Append LIMIT/OFFSET for a 1-based page."""
    limit, offset = page_window(page, page_size)
    return f"{query}\nLIMIT {limit} OFFSET {offset}"


def build_count_query(filters: SearchFilters) -> str:
    return build_query(filters, count_only=True)


def build_data_query(filters: SearchFilters, page: int, page_size: int) -> str:
    return paginate(build_query(filters, count_only=False), page, page_size)
