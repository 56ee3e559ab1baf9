"""Build GitHub user search queries from structured filters."""

import math
import re

from .models import SearchParameters

# GitHub logins: alphanumerics and single inner hyphens, at most 39 chars
HANDLE_RE = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9]|-(?=[A-Za-z0-9])){0,38}$")
_LANGUAGE_STRIP_RE = re.compile(r"[^A-Za-z0-9+#-]")


def is_valid_handle(fragment: str) -> bool:
    return bool(HANDLE_RE.match(fragment))


def _clean(value) -> str | None:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def _phrase(value: str) -> str:
    """Quote a value containing whitespace so it stays one search term."""
    value = value.replace('"', "")
    if any(ch.isspace() for ch in value):
        return f'"{value}"'
    return value


def _positive_int(value) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer() and value > 0:
            return int(value)
        return None
    if isinstance(value, str):
        value = value.strip()
        # isdigit also accepts superscripts, which int() rejects
        if not (value.isascii() and value.isdecimal()):
            return None
        n = int(value)
        return n if n > 0 else None
    return None


def _identity_term(username) -> str | None:
    fragment = _clean(username)
    if fragment is None:
        return None
    if is_valid_handle(fragment):
        return f"user:{fragment}"
    term = _phrase(fragment)
    if not term.strip('"').strip():
        return None
    return f"{term} in:login in:name"


def _filter_terms(params: SearchParameters) -> list[str]:
    terms = []

    for qualifier, value in (("location", params.location), ("company", params.company)):
        value = _clean(value)
        if value:
            value = _phrase(value)
            if value.strip('"').strip():
                terms.append(f"{qualifier}:{value}")

    for qualifier, low, high in (
        ("repos", params.min_repos, params.max_repos),
        ("followers", params.min_followers, params.max_followers),
    ):
        low = _positive_int(low)
        high = _positive_int(high)
        if low is not None:
            terms.append(f"{qualifier}:>={low}")
        if high is not None:
            terms.append(f"{qualifier}:<={high}")

    language = _clean(params.language)
    if language:
        language = _LANGUAGE_STRIP_RE.sub("", language)
        if language:
            terms.append(f"language:{language}")

    created = _clean(params.created)
    if created:
        terms.append(f"created:{created.replace(' ', '')}")

    if params.hireable is True:
        terms.append("is:hireable")

    return terms


def build_query(params: SearchParameters | dict) -> str:
    """Compose the ``q`` string for the user search endpoint.

    Deterministic and never raises: malformed fields are dropped. Returns an
    empty string when no usable filter is present.
    """
    if isinstance(params, dict):
        params = SearchParameters.from_dict(params)

    identity = _identity_term(params.username)
    filters = _filter_terms(params)

    account_type = _clean(params.account_type)
    if account_type:
        account_type = re.sub(r"[^a-z]", "", account_type.lower())

    terms = []
    if identity:
        terms.append(identity)
    if account_type:
        terms.append(f"type:{account_type}")
    elif identity is None and filters:
        terms.append("type:user")
    terms.extend(filters)
    return " ".join(terms)
