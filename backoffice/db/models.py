"""
Geography hierarchy: province -> canton -> district -> barrio.

Children hold their parents' codes plus denormalised copies of the parents'
names. The names are a cache refreshed by the geography service on every
write; deleting or renumbering a parent cascades at the storage layer.
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    ForeignKeyConstraint,
    Index,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
)

from backoffice.db.session import Base

NAME_LENGTH = 120


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RecordMixin:
    """Generated identifier and timestamps shared by every master-data row."""
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)


class Province(RecordMixin, Base):
    __tablename__ = "provinces"
    __table_args__ = (
        UniqueConstraint("code", name="provinces_uq_key"),
    )

    code = Column(Integer, nullable=False)
    name = Column(String(NAME_LENGTH), nullable=False, index=True)


class Canton(RecordMixin, Base):
    __tablename__ = "cantons"
    __table_args__ = (
        UniqueConstraint("province_code", "code", name="cantons_uq_key"),
        Index("cantons_province_code_idx", "province_code"),
    )

    province_code = Column(
        Integer,
        ForeignKey("provinces.code", ondelete="CASCADE", onupdate="CASCADE"),
        nullable=False,
    )
    province_name = Column(String(NAME_LENGTH), nullable=False)
    code = Column(Integer, nullable=False)
    name = Column(String(NAME_LENGTH), nullable=False, index=True)


class District(RecordMixin, Base):
    __tablename__ = "districts"
    __table_args__ = (
        UniqueConstraint("province_code", "canton_code", "code", name="districts_uq_key"),
        ForeignKeyConstraint(
            ["province_code", "canton_code"],
            ["cantons.province_code", "cantons.code"],
            ondelete="CASCADE",
            onupdate="CASCADE",
        ),
        Index("districts_province_code_canton_code_idx", "province_code", "canton_code"),
    )

    province_code = Column(Integer, nullable=False)
    province_name = Column(String(NAME_LENGTH), nullable=False)
    canton_code = Column(Integer, nullable=False)
    canton_name = Column(String(NAME_LENGTH), nullable=False)
    code = Column(Integer, nullable=False)
    name = Column(String(NAME_LENGTH), nullable=False, index=True)


class Barrio(RecordMixin, Base):
    __tablename__ = "barrios"
    __table_args__ = (
        UniqueConstraint("province_code", "canton_code", "district_name", "name", name="barrios_uq_key"),
        ForeignKeyConstraint(
            ["province_code", "canton_code"],
            ["cantons.province_code", "cantons.code"],
            ondelete="CASCADE",
            onupdate="CASCADE",
        ),
        Index("barrios_province_code_canton_code_idx", "province_code", "canton_code"),
    )

    province_key = Column(String(80), nullable=False, index=True)
    province_code = Column(Integer, nullable=False)
    province_name = Column(String(NAME_LENGTH), nullable=False)
    canton_code = Column(Integer, nullable=False)
    canton_name = Column(String(NAME_LENGTH), nullable=False)
    district_code = Column(Integer, nullable=True)
    district_name = Column(String(NAME_LENGTH), nullable=False, index=True)
    name = Column(String(NAME_LENGTH), nullable=False, index=True)
