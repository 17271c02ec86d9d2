"""
Text normalisation helpers shared by header matching and geography keys.
"""
import re
import unicodedata
from typing import Any

_NON_ALNUM = re.compile(r"[^a-z0-9]")
_NON_ALNUM_RUN = re.compile(r"[^a-z0-9]+")
_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def strip_accents(value: str) -> str:
    """Drop combining marks so 'Código' and 'Codigo' compare equal."""
    decomposed = unicodedata.normalize("NFD", value)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_header(value: Any) -> str:
    """
    Reduce a spreadsheet header to its matching key.

    Trims, lowercases, strips accent marks and removes every character that is
    not a lowercase ASCII letter or digit: ``" Tipo de Unidad "`` becomes
    ``"tipodeunidad"``.
    """
    if value is None:
        return ""
    text = strip_accents(str(value).strip().lower())
    return _NON_ALNUM.sub("", text)


def slugify(value: str) -> str:
    """Accent-free, lowercase slug with single hyphens: ``"San José"`` -> ``"san-jose"``."""
    text = strip_accents(str(value).strip().lower())
    return _NON_ALNUM_RUN.sub("-", text).strip("-")


def to_snake_case(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()
