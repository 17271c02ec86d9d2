"""
Registry of every master-data catalog administered through the generic engine.

The list is fixed at import time; lookups never mutate it.
"""
from typing import Dict, List, Optional

from backoffice.core.exceptions import CatalogNotFoundError
from backoffice.domain.catalogs.fields import (
    CatalogDefinition,
    FieldType,
    decimal_field,
    integer_field,
    text_field,
)


def _coded_catalog(key: str, label: str, table_name: str, code_type: FieldType = FieldType.DECIMAL,
                   description_length: Optional[int] = None) -> CatalogDefinition:
    """The common (descripcion, codigo) shape, unique by code."""
    code = integer_field("codigo") if code_type == FieldType.INTEGER else decimal_field("codigo")
    return CatalogDefinition(
        key=key,
        label=label,
        table_name=table_name,
        fields=(text_field("descripcion", max_length=description_length), code),
        unique_key=("codigo",),
        searchable_fields=("descripcion", "codigo"),
    )


CATALOG_DEFINITIONS: List[CatalogDefinition] = [
    _coded_catalog("tipos-documento", "Tipos de Documentos", "tipos_documento", FieldType.INTEGER),
    _coded_catalog("situaciones-presentacion", "Situación de Presentación", "situaciones_presentacion",
                   description_length=1024),
    CatalogDefinition(
        key="actividades-economicas",
        label="Actividades Económicas",
        table_name="actividades_economicas",
        fields=(decimal_field("codigo"), text_field("nombre")),
        unique_key=("codigo",),
        searchable_fields=("nombre", "codigo"),
    ),
    _coded_catalog("condiciones-venta", "Condiciones de Venta", "condiciones_venta", description_length=1024),
    _coded_catalog("tipos-identificacion", "Tipos de Identificación", "tipos_identificacion"),
    _coded_catalog("formas-farmaceuticas", "Formas Farmacéuticas", "formas_farmaceuticas", FieldType.INTEGER),
    _coded_catalog("tipos-codigo-ps", "Tipos de Código para P o S", "tipos_codigo_ps"),
    CatalogDefinition(
        key="unidades-medida",
        label="Unidades de Medida",
        table_name="unidades_medida",
        fields=(
            text_field("unidad", max_length=120),
            text_field("simbolo", max_length=30, synonyms=["símbolo"]),
            text_field("tipo_unidad", max_length=120, synonyms=["tipodeunidad", "tipoUnidad"]),
        ),
        unique_key=("unidad",),
        searchable_fields=("unidad", "simbolo", "tipo_unidad"),
    ),
    _coded_catalog("tipos-transaccion", "Tipos de Transacción", "tipos_transaccion"),
    _coded_catalog("tipos-descuento", "Tipos de Descuento", "tipos_descuento", FieldType.INTEGER),
    _coded_catalog("tipos-impuestos", "Tipos de Impuestos", "tipos_impuestos"),
    _coded_catalog("tarifas-iva", "Tarifas de IVA", "tarifas_iva", FieldType.INTEGER),
    _coded_catalog("tipos-documento-exoneracion", "Tipos de Documento de Exoneración",
                   "tipos_documento_exoneracion"),
    _coded_catalog("instituciones-exoneracion", "Instituciones o Dep. Emisoras de Exoneración",
                   "instituciones_exoneracion", FieldType.INTEGER),
    _coded_catalog("tipos-otros-cargos", "Tipos de Otros Cargos", "tipos_otros_cargos", FieldType.INTEGER),
    CatalogDefinition(
        key="codigos-moneda",
        label="Códigos de Moneda",
        table_name="codigos_moneda",
        fields=(
            text_field("pais", max_length=120, synonyms=["país"]),
            text_field("moneda", max_length=120),
            text_field("codigo", max_length=3),
        ),
        unique_key=("codigo",),
        searchable_fields=("pais", "moneda", "codigo"),
    ),
    _coded_catalog("medios-pago", "Medios de Pago", "medios_pago"),
    _coded_catalog("tipos-documento-referencia", "Tipos de Documento de Referencia", "tipos_documento_referencia"),
    _coded_catalog("codigos-referencia", "Códigos de Referencia", "codigos_referencia"),
    _coded_catalog("mensajes-recepcion", "Mensajes de Recepción", "mensajes_recepcion"),
    _coded_catalog("condiciones-impuesto", "Condiciones de Impuesto", "condiciones_impuesto"),
    CatalogDefinition(
        key="cabys",
        label="Catálogo de Bienes y Servicios",
        table_name="cabys",
        fields=(
            text_field("categoria", max_length=1024, synonyms=["categoría"]),
            text_field("descripcion", max_length=1024, synonyms=["descripción"]),
            decimal_field("impuesto", required=False, precision=2, scale=0),
            text_field("incluye", required=False, max_length=1024),
            text_field("excluye", required=False, max_length=1024),
        ),
        unique_key=("categoria", "descripcion"),
        searchable_fields=("categoria", "descripcion"),
    ),
]

CATALOGS_BY_KEY: Dict[str, CatalogDefinition] = {d.key: d for d in CATALOG_DEFINITIONS}

if len(CATALOGS_BY_KEY) != len(CATALOG_DEFINITIONS):
    raise RuntimeError("Catalog keys must be unique")


def get_catalog(key: str) -> CatalogDefinition:
    """Return the catalog registered under ``key`` or raise ``CatalogNotFoundError``."""
    definition = CATALOGS_BY_KEY.get(key)
    if definition is None:
        raise CatalogNotFoundError(key)
    return definition


def list_catalogs() -> List[Dict[str, str]]:
    """``[{key, label}]`` for every registered catalog, in registry order."""
    return [{"key": d.key, "label": d.label} for d in CATALOG_DEFINITIONS]
