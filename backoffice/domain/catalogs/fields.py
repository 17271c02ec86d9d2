"""
Declarative field and catalog schemas.

A catalog is described entirely as data: an ordered list of ``FieldSchema``
entries plus the unique key and searchable fields. The validator, the
spreadsheet ingestion pipeline and the query builder are all driven from a
``CatalogDefinition``; adding a catalog means declaring one, not writing code.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from backoffice.utils.text import normalize_header, to_snake_case

DEFAULT_TEXT_LENGTH = 1024
DEFAULT_PRECISION = 12
DEFAULT_SCALE = 4


class FieldType(str, Enum):
    TEXT = "text"
    INTEGER = "integer"
    DECIMAL = "decimal"


@dataclass(frozen=True)
class FieldSchema:
    """
    One column of a catalog.

    ``derived`` fields are accepted in payloads and spreadsheets but their
    values are always recomputed by the owning service (denormalised parent
    names in the geography hierarchy); the validator never passes them through.
    """
    name: str
    type: FieldType
    required: bool = False
    max_length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    header_synonyms: FrozenSet[str] = frozenset()
    derived: bool = False

    def __post_init__(self):
        if not isinstance(self.header_synonyms, frozenset):
            object.__setattr__(self, "header_synonyms", frozenset(self.header_synonyms))

    @property
    def column_name(self) -> str:
        return to_snake_case(self.name)

    @property
    def effective_max_length(self) -> int:
        return self.max_length or DEFAULT_TEXT_LENGTH

    @property
    def effective_precision(self) -> int:
        return self.precision or DEFAULT_PRECISION

    @property
    def effective_scale(self) -> int:
        return DEFAULT_SCALE if self.scale is None else self.scale

    def header_keys(self) -> List[str]:
        """Normalised header spellings, own name first, synonyms in stable order."""
        keys = [normalize_header(self.name)]
        keys.extend(normalize_header(s) for s in sorted(self.header_synonyms))
        return [key for key in keys if key]


@dataclass(frozen=True)
class CatalogDefinition:
    """A fixed-vocabulary table administered through the generic engine."""
    key: str
    label: str
    table_name: str
    fields: Tuple[FieldSchema, ...]
    unique_key: Tuple[str, ...]
    searchable_fields: Tuple[str, ...] = ()
    header_lookup: Dict[str, FieldSchema] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "fields", tuple(self.fields))
        object.__setattr__(self, "unique_key", tuple(self.unique_key))
        object.__setattr__(self, "searchable_fields", tuple(self.searchable_fields))

        names = [f.name for f in self.fields]
        if len(set(names)) != len(names):
            raise ValueError(f"Catalog '{self.key}' declares duplicate field names")
        if not self.unique_key:
            raise ValueError(f"Catalog '{self.key}' needs a non-empty unique key")
        unknown = [n for n in (*self.unique_key, *self.searchable_fields) if n not in names]
        if unknown:
            raise ValueError(f"Catalog '{self.key}' references undeclared fields: {unknown}")

        object.__setattr__(self, "header_lookup", _build_header_lookup(self.fields))

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    @property
    def required_fields(self) -> List[FieldSchema]:
        return [f for f in self.fields if f.required]

    def get_field(self, name: str) -> Optional[FieldSchema]:
        for candidate in self.fields:
            if candidate.name == name:
                return candidate
        return None


def _build_header_lookup(fields: Iterable[FieldSchema]) -> Dict[str, FieldSchema]:
    # First field to claim a normalised spelling keeps it.
    lookup: Dict[str, FieldSchema] = {}
    for schema in fields:
        for key in schema.header_keys():
            lookup.setdefault(key, schema)
    return lookup


def text_field(name: str, required: bool = True, max_length: Optional[int] = None,
               synonyms: Iterable[str] = (), derived: bool = False) -> FieldSchema:
    return FieldSchema(name, FieldType.TEXT, required=required, max_length=max_length,
                       header_synonyms=frozenset(synonyms), derived=derived)


def integer_field(name: str, required: bool = True, synonyms: Iterable[str] = ()) -> FieldSchema:
    return FieldSchema(name, FieldType.INTEGER, required=required, header_synonyms=frozenset(synonyms))


def decimal_field(name: str, required: bool = True, precision: int = DEFAULT_PRECISION,
                  scale: int = DEFAULT_SCALE, synonyms: Iterable[str] = ()) -> FieldSchema:
    return FieldSchema(name, FieldType.DECIMAL, required=required, precision=precision,
                       scale=scale, header_synonyms=frozenset(synonyms))
