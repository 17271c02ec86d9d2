"""
Parent resolution for geography records.

Each ``enrich_*`` function takes a validated child record, checks that every
ancestor it references is stored, and returns a copy carrying the ancestors'
current names. A missing ancestor raises ``ParentNotFoundError``; the import
pipeline turns that into a row error, single writes into a 404.
"""
from typing import Any, Dict, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from backoffice.core.exceptions import ParentNotFoundError
from backoffice.db.models import Canton, District, Province
from backoffice.utils.text import slugify


def build_province_key(province_name: str) -> str:
    return slugify(province_name)


def find_province(db: Session, code: int) -> Optional[Province]:
    return db.execute(select(Province).where(Province.code == code)).scalar_one_or_none()


def find_canton(db: Session, province_code: int, canton_code: int) -> Optional[Canton]:
    return db.execute(
        select(Canton).where(Canton.province_code == province_code, Canton.code == canton_code)
    ).scalar_one_or_none()


def find_district_by_code(db: Session, province_code: int, canton_code: int, code: int) -> Optional[District]:
    return db.execute(
        select(District).where(
            District.province_code == province_code,
            District.canton_code == canton_code,
            District.code == code,
        )
    ).scalar_one_or_none()


def find_district_by_name(db: Session, province_code: int, canton_code: int, name: str) -> Optional[District]:
    return db.execute(
        select(District)
        .where(
            District.province_code == province_code,
            District.canton_code == canton_code,
            func.lower(District.name) == name.strip().lower(),
        )
        .order_by(District.code)
        .limit(1)
    ).scalar_one_or_none()


def _require_province(db: Session, code: int) -> Province:
    province = find_province(db, code)
    if province is None:
        raise ParentNotFoundError(f"Province {code} not found")
    return province


def _require_canton(db: Session, province_code: int, canton_code: int) -> Canton:
    canton = find_canton(db, province_code, canton_code)
    if canton is None:
        raise ParentNotFoundError(f"Canton {canton_code} not found in province {province_code}")
    return canton


def enrich_canton(db: Session, record: Dict[str, Any]) -> Dict[str, Any]:
    province = _require_province(db, record["province_code"])
    return {**record, "province_name": province.name}


def enrich_district(db: Session, record: Dict[str, Any]) -> Dict[str, Any]:
    province = _require_province(db, record["province_code"])
    canton = _require_canton(db, record["province_code"], record["canton_code"])
    return {**record, "province_name": province.name, "canton_name": canton.name}


def enrich_barrio(db: Session, record: Dict[str, Any]) -> Dict[str, Any]:
    """
    Resolve province, canton and district for a barrio.

    The district is looked up by code when one is given, falling back to the
    district name. The stored district name and code always come from the
    resolved district.
    """
    province_code = record["province_code"]
    canton_code = record["canton_code"]
    province = _require_province(db, province_code)
    canton = _require_canton(db, province_code, canton_code)

    district = None
    if record.get("district_code") is not None:
        district = find_district_by_code(db, province_code, canton_code, record["district_code"])
    if district is None and record.get("district_name"):
        district = find_district_by_name(db, province_code, canton_code, record["district_name"])
    if district is None:
        reference = record.get("district_code") or record.get("district_name")
        raise ParentNotFoundError(
            f"District {reference} not found in canton {canton_code} of province {province_code}"
        )

    return {
        **record,
        "province_key": build_province_key(province.name),
        "province_name": province.name,
        "canton_name": canton.name,
        "district_code": district.code,
        "district_name": district.name,
    }
