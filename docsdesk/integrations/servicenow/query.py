"""Query-string encoding for Table API collection reads."""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

# Characters encodeURIComponent leaves untouched
_UNRESERVED = "-_.!~*'()"


@dataclass(frozen=True)
class TableQueryParams:
    """Optional sysparm_* parameters for a table read.

    display_value defaults to False so references come back as sys_ids
    rather than display strings.
    """

    fields: Optional[str] = None
    limit: Optional[int] = None
    offset: Optional[int] = None
    filter: Optional[str] = None
    display_value: Optional[bool] = None


def _encode(value: str) -> str:
    return quote(value, safe=_UNRESERVED)


def build_query_string(params: Optional[TableQueryParams] = None) -> str:
    """Encode ``params`` in the fixed order fields, limit, offset, filter, display_value.

    Absent fields are skipped (empty strings count as absent for fields and
    filter); sysparm_display_value is always emitted. The result always starts
    with "?".

    Example:
        >>> build_query_string(TableQueryParams(limit=10, filter="a>b"))
        '?sysparm_limit=10&sysparm_query=a%3Eb&sysparm_display_value=false'
    """
    params = params or TableQueryParams()
    parts = []

    if params.fields:
        parts.append(f"sysparm_fields={_encode(params.fields)}")
    if params.limit is not None:
        parts.append(f"sysparm_limit={int(params.limit)}")
    if params.offset is not None:
        parts.append(f"sysparm_offset={int(params.offset)}")
    if params.filter:
        parts.append(f"sysparm_query={_encode(params.filter)}")
    display_value = "true" if params.display_value else "false"
    parts.append(f"sysparm_display_value={display_value}")

    return "?" + "&".join(parts)
