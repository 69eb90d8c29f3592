"""Field normalization for loosely shaped catalog records.

Raw records arrive from the static document, from pasted JSON, and from
uploaded files, each with its own habits: ``website`` instead of ``url``,
``pricing`` instead of ``pricing_text``, stray backticks, numbers as strings.
Everything here is total: any input object yields a complete
:class:`~tooldir.catalog.models.ToolRecord` and nothing raises.
"""

from __future__ import annotations

import math
import random
import time
from collections.abc import Mapping
from typing import Any, Sequence, Union
from urllib.parse import urlsplit, urlunsplit

from .models import ToolRecord

DEFAULT_CATEGORY = "Other"
DEFAULT_STATUS = "Active"
DEFAULT_LOGO_LOOKUP = "https://www.google.com/s2/favicons?domain={host}"
PLACEHOLDER_LOGO = "https://placehold.co/56x56/eeeeee/666666?text=AI"
REQUIRED_FIELDS = ("name", "url", "category")

_DESCRIPTION_TEMPLATE = "Professional {category} tool for enhanced productivity."
_URL_FIELDS = ("url", "website", "link")
_PRICING_FIELDS = ("pricing_text", "pricing", "pricing_type")
_LOGO_SCHEMES = ("http://", "https://")


def clean_text(value: Any) -> str:
    """Return ``value`` with backticks removed and whitespace trimmed.

    Non-string values clean to an empty string.
    """
    if not isinstance(value, str):
        return ""
    return value.replace("`", "").strip()


def normalize_url(value: Any) -> str:
    """Return a canonical absolute address, or ``""`` when ``value`` is unusable.

    Scheme and host are lowercased, the fragment is dropped, and trailing
    slashes are stripped from the path. The query string is kept.
    """
    text = clean_text(value)
    if not text:
        return ""
    try:
        parts = urlsplit(text)
        parts.port  # raises on a malformed port
    except ValueError:
        return ""
    if not parts.scheme or not parts.hostname:
        return ""

    userinfo, at, hostport = parts.netloc.rpartition("@")
    netloc = f"{userinfo}{at}{hostport.lower()}"
    result = urlunsplit((parts.scheme.lower(), netloc, parts.path.rstrip("/"), parts.query, ""))
    # Dropping the fragment or a trailing slash can expose trailing whitespace.
    return result if result == clean_text(result) else normalize_url(result)


def bare_host(url: str) -> str:
    """Return the host of an address without a leading ``www.``."""
    normalized = normalize_url(url)
    if not normalized:
        return ""
    host = urlsplit(normalized).hostname or ""
    return host[4:] if host.startswith("www.") else host


def name_from_url(url: Any) -> str:
    """Derive a short display name such as ``github/copilot`` from an address."""
    normalized = normalize_url(url)
    if not normalized:
        return ""
    host = bare_host(normalized)
    label = host.rsplit(".", 1)[0] if "." in host else host
    segments = [segment for segment in urlsplit(normalized).path.split("/") if segment]
    last = segments[-1] if segments else ""
    return f"{label}/{last}" if len(last) > 1 else label


def derive_logo(url: str, provided: Any = None, *, lookup: str = DEFAULT_LOGO_LOOKUP) -> str:
    """Pick the logo address for a tool.

    Args:
        url: Normalized tool address.
        provided: Logo supplied with the raw record, if any.
        lookup: Favicon lookup template containing ``{host}``.

    Returns:
        str: The provided logo when it is an http(s) address, otherwise the
        lookup address for the tool host, otherwise the placeholder image.
    """
    candidate = clean_text(provided)
    if candidate.startswith(_LOGO_SCHEMES):
        return candidate
    host = bare_host(url)
    if not host:
        return PLACEHOLDER_LOGO
    return lookup.replace("{host}", host)


def coerce_int(value: Any, default: int = 0) -> int:
    """Coerce ints, finite floats, and numeric strings; anything else gives ``default``."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            try:
                value = float(text)
            except ValueError:
                return default
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else default
    return default


def coerce_bool(value: Any) -> bool:
    """Only a real ``True`` counts; strings and numbers do not."""
    return value is True


def generate_id() -> int:
    """Return a millisecond timestamp plus a small random component."""
    return int(time.time() * 1000) + random.randrange(1000)


def normalize_id(value: Any) -> Union[int, str]:
    """Keep usable identifiers and mint a fresh one otherwise."""
    if isinstance(value, bool):
        return generate_id()
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return clean_text(value) or generate_id()


def _first_text(data: Mapping[str, Any], fields: Sequence[str]) -> str:
    for field in fields:
        text = clean_text(data.get(field))
        if text:
            return text
    return ""


def normalize_tool(raw: Any, *, logo_lookup: str = DEFAULT_LOGO_LOOKUP) -> ToolRecord:
    """Turn any raw record into a canonical :class:`ToolRecord`.

    Args:
        raw: Mapping, existing record, or arbitrary object (treated as empty).
        logo_lookup: Favicon lookup template used when no logo is provided.

    Returns:
        ToolRecord: Record with every field present and typed.
    """
    if isinstance(raw, ToolRecord):
        data: Mapping[str, Any] = raw.model_dump()
    elif isinstance(raw, Mapping):
        data = raw
    else:
        data = {}

    url = normalize_url(_first_text(data, _URL_FIELDS))
    category = clean_text(data.get("category")) or DEFAULT_CATEGORY

    return ToolRecord(
        id=normalize_id(data.get("id")),
        name=clean_text(data.get("name")) or name_from_url(url),
        description=clean_text(data.get("description"))
        or _DESCRIPTION_TEMPLATE.format(category=category),
        category=category,
        url=url,
        logo=derive_logo(url, data.get("logo"), lookup=logo_lookup),
        upvotes=max(0, coerce_int(data.get("upvotes"))),
        featured=coerce_bool(data.get("featured")),
        top=coerce_bool(data.get("top")),
        verified=coerce_bool(data.get("verified")),
        pricing_text=_first_text(data, _PRICING_FIELDS),
        section=clean_text(data.get("section")),
        status=clean_text(data.get("status")) or DEFAULT_STATUS,
        order_index=coerce_int(data.get("order_index")),
    )


def missing_fields(record: ToolRecord) -> list[str]:
    """Return the required fields that are still empty after normalization."""
    return [field for field in REQUIRED_FIELDS if not getattr(record, field)]


__all__ = [
    "DEFAULT_CATEGORY",
    "DEFAULT_LOGO_LOOKUP",
    "PLACEHOLDER_LOGO",
    "REQUIRED_FIELDS",
    "bare_host",
    "clean_text",
    "coerce_bool",
    "coerce_int",
    "derive_logo",
    "generate_id",
    "missing_fields",
    "name_from_url",
    "normalize_id",
    "normalize_tool",
    "normalize_url",
]
