"""
Tests for paginated, searchable listing.
"""
import pytest

from backoffice.db.catalog_tables import get_catalog_table
from backoffice.domain.catalogs.registry import get_catalog
from backoffice.domain.imports.upsert import ImportMode, commit_records
from backoffice.domain.queries.pagination import build_page_query, clamp_limit, escape_like
from backoffice.domain.records.store import list_records

DEFINITION = get_catalog("tarifas-iva")
TABLE = get_catalog_table("tarifas-iva")


@pytest.fixture
def tax_rates(db):
    rows = [
        {"codigo": 1, "descripcion": "EXENTO"},
        {"codigo": 2, "descripcion": "Tarifa reducida 1%"},
        {"codigo": 3, "descripcion": "Tarifa reducida 2%"},
        {"codigo": 4, "descripcion": "Tarifa reducida 4%"},
        {"codigo": 5, "descripcion": "Transitorio 0%"},
        {"codigo": 6, "descripcion": "Transitorio_4"},
        {"codigo": 13, "descripcion": "Tarifa general"},
    ]
    commit_records(db, TABLE, rows, ImportMode.APPEND, ["codigo"])
    return rows


class TestLimits:
    @pytest.mark.parametrize("requested, expected", [
        (None, 50),
        (10, 10),
        (200, 200),
        (1000, 200),
        (0, 1),
        (-5, 1),
    ])
    def test_clamp_limit(self, requested, expected):
        assert clamp_limit(requested, 50, 200) == expected

    def test_page_query_window(self):
        query = build_page_query(TABLE, ["descripcion"], page=3, limit=20)
        assert (query.page, query.limit, query.offset) == (3, 20, 40)

    def test_page_below_one_is_first_page(self):
        query = build_page_query(TABLE, ["descripcion"], page=0, limit=20)
        assert (query.page, query.offset) == (1, 0)

    def test_oversized_limit_is_reported_clamped(self, db, tax_rates):
        records, total, query = list_records(db, DEFINITION, TABLE, page=1, limit=1000)
        assert query.limit == 200
        assert total == len(tax_rates)
        assert len(records) == len(tax_rates)


class TestSearch:
    def test_escape_like(self):
        assert escape_like("50%_a\\b") == "50\\%\\_a\\\\b"

    def test_search_is_case_insensitive(self, db, tax_rates):
        records, total, _ = list_records(db, DEFINITION, TABLE, page=1, limit=50, search="exento")
        assert total == 1
        assert records[0]["descripcion"] == "EXENTO"

    def test_wildcards_are_literal(self, db, tax_rates):
        records, _, _ = list_records(db, DEFINITION, TABLE, page=1, limit=50, search="%")
        assert sorted(r["codigo"] for r in records) == [2, 3, 4, 5]

        records, _, _ = list_records(db, DEFINITION, TABLE, page=1, limit=50, search="_")
        assert [r["codigo"] for r in records] == [6]

    def test_numeric_fields_are_searchable_as_text(self, db, tax_rates):
        records, _, _ = list_records(db, DEFINITION, TABLE, page=1, limit=50, search="13")
        assert [r["codigo"] for r in records] == [13]

    def test_search_is_trimmed_and_blank_search_is_ignored(self, db, tax_rates):
        _, total, _ = list_records(db, DEFINITION, TABLE, page=1, limit=50, search="   ")
        assert total == len(tax_rates)
        _, total, _ = list_records(db, DEFINITION, TABLE, page=1, limit=50, search="  general ")
        assert total == 1

    def test_search_matches_any_searchable_field(self, db, tax_rates):
        records, _, _ = list_records(db, DEFINITION, TABLE, page=1, limit=50, search="4")
        assert sorted(r["codigo"] for r in records) == [4, 6]


class TestPaging:
    def test_pages_partition_the_result(self, db, tax_rates):
        seen = []
        for page in (1, 2, 3):
            records, total, query = list_records(db, DEFINITION, TABLE, page=page, limit=3)
            assert total == 7
            seen.extend(record["id"] for record in records)
        assert len(seen) == 7
        assert len(set(seen)) == 7

    def test_page_past_the_end_is_empty(self, db, tax_rates):
        records, total, _ = list_records(db, DEFINITION, TABLE, page=10, limit=3)
        assert records == []
        assert total == 7

    def test_records_carry_identity_and_timestamps(self, db, tax_rates):
        records, _, _ = list_records(db, DEFINITION, TABLE, page=1, limit=1)
        assert set(records[0]) == {"id", "descripcion", "codigo", "created_at", "updated_at"}
