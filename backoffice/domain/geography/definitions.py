"""
Field schemas for the four geography levels.

Parent names (``province_name``, ``canton_name``) and ``province_key`` are
declared as derived fields: spreadsheets and payloads may carry them, but the
stored values always come from the live parent rows. The header synonyms match
the column titles of the official territorial division workbook, where the
province, canton and district codes appear as ``Codigo``, ``Codigo1`` and
``Codigo2``.
"""
from backoffice.db.models import NAME_LENGTH
from backoffice.domain.catalogs.fields import CatalogDefinition, integer_field, text_field

PROVINCES = CatalogDefinition(
    key="provinces",
    label="Provincias",
    table_name="provinces",
    fields=(
        text_field("name", max_length=NAME_LENGTH, synonyms=("provincia", "nombre")),
        integer_field("code", synonyms=("codigo", "codigoprovincia")),
    ),
    unique_key=("code",),
    searchable_fields=("name", "code"),
)

CANTONS = CatalogDefinition(
    key="cantons",
    label="Cantones",
    table_name="cantons",
    fields=(
        text_field("province_name", required=False, max_length=NAME_LENGTH,
                   synonyms=("provincia",), derived=True),
        integer_field("province_code", synonyms=("codigo", "codigoprovincia")),
        text_field("name", max_length=NAME_LENGTH, synonyms=("canton", "nombre")),
        integer_field("code", synonyms=("codigo1", "codigocanton")),
    ),
    unique_key=("province_code", "code"),
    searchable_fields=("name", "province_name", "code", "province_code"),
)

DISTRICTS = CatalogDefinition(
    key="districts",
    label="Distritos",
    table_name="districts",
    fields=(
        text_field("province_name", required=False, max_length=NAME_LENGTH,
                   synonyms=("provincia",), derived=True),
        integer_field("province_code", synonyms=("codigo", "codigoprovincia")),
        text_field("canton_name", required=False, max_length=NAME_LENGTH,
                   synonyms=("canton",), derived=True),
        integer_field("canton_code", synonyms=("codigo1", "codigocanton")),
        text_field("name", max_length=NAME_LENGTH, synonyms=("distrito", "nombre")),
        integer_field("code", synonyms=("codigo2", "codigodistrito")),
    ),
    unique_key=("province_code", "canton_code", "code"),
    searchable_fields=("name", "canton_name", "province_name", "code", "province_code", "canton_code"),
)

BARRIOS = CatalogDefinition(
    key="barrios",
    label="Barrios",
    table_name="barrios",
    fields=(
        text_field("province_key", required=False, max_length=80, derived=True),
        text_field("province_name", required=False, max_length=NAME_LENGTH,
                   synonyms=("provincia",), derived=True),
        integer_field("province_code", synonyms=("codigo", "codigoprovincia")),
        text_field("canton_name", required=False, max_length=NAME_LENGTH,
                   synonyms=("canton",), derived=True),
        integer_field("canton_code", synonyms=("codigo1", "codigocanton")),
        integer_field("district_code", required=False, synonyms=("codigo2", "codigodistrito")),
        text_field("district_name", max_length=NAME_LENGTH, synonyms=("distrito",)),
        text_field("name", max_length=NAME_LENGTH, synonyms=("barrio", "nombre")),
    ),
    unique_key=("province_code", "canton_code", "district_name", "name"),
    searchable_fields=(
        "name", "district_name", "canton_name", "province_name",
        "province_code", "canton_code", "district_code",
    ),
)

GEOGRAPHY_DEFINITIONS = (PROVINCES, CANTONS, DISTRICTS, BARRIOS)
