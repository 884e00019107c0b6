from __future__ import annotations

from typing import List

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .db import Base


class NameColumnsMixin:
    """
    Display names in both languages plus their case-folded search copies.

    The loader writes each *_search column together with its display column;
    nothing else writes these tables.
    """

    name_en: Mapped[str] = mapped_column(String(255), nullable=False)
    name_np: Mapped[str] = mapped_column(String(255), nullable=False)
    name_en_search: Mapped[str] = mapped_column(String(255), nullable=False)
    name_np_search: Mapped[str] = mapped_column(String(255), nullable=False)


class Province(NameColumnsMixin, Base):
    """
    Top level of the hierarchy.
    """

    __tablename__ = "provinces"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)

    districts: Mapped[List["District"]] = relationship(back_populates="province")

    def __repr__(self) -> str:
        return f"<Province id={self.id!r} name_en={self.name_en!r}>"


class District(NameColumnsMixin, Base):
    __tablename__ = "districts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    province_id: Mapped[int] = mapped_column(
        ForeignKey("provinces.id"),
        nullable=False,
        index=True,
    )

    province: Mapped[Province] = relationship(back_populates="districts")
    municipalities: Mapped[List["Municipality"]] = relationship(
        back_populates="district"
    )

    def __repr__(self) -> str:
        return f"<District id={self.id!r} province_id={self.province_id!r}>"


class Municipality(NameColumnsMixin, Base):
    """
    Local level unit, classified as e.g. "Municipality" or "Rural Municipality".
    """

    __tablename__ = "municipalities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    district_id: Mapped[int] = mapped_column(
        ForeignKey("districts.id"),
        nullable=False,
        index=True,
    )
    type_en: Mapped[str] = mapped_column(String(100), nullable=False)
    type_np: Mapped[str] = mapped_column(String(100), nullable=False)

    district: Mapped[District] = relationship(back_populates="municipalities")

    def __repr__(self) -> str:
        return f"<Municipality id={self.id!r} district_id={self.district_id!r}>"


class WardGroup(Base):
    """
    All ward numbers of one municipality, stored as a single row.

    The row id is the owning municipality's id, and municipality_id repeats
    it. encoded_wards is the comma-delimited ordinal list, see
    nl_backend.ordinals.
    """

    __tablename__ = "wards"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    municipality_id: Mapped[int] = mapped_column(
        ForeignKey("municipalities.id"),
        nullable=False,
        index=True,
    )
    encoded_wards: Mapped[str] = mapped_column(Text, nullable=False, default="")

    def __repr__(self) -> str:
        return f"<WardGroup id={self.id!r} encoded_wards={self.encoded_wards!r}>"


__all__ = ["District", "Municipality", "Province", "WardGroup"]
