from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class SiteRow(Base):
    __tablename__ = "sites"

    station_num: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    auto_download: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    tz_offset_seconds: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    files: Mapped[list["FileRow"]] = relationship(
        back_populates="site", cascade="all, delete-orphan", passive_deletes=True
    )
    site_ids: Mapped[list["SiteIdRow"]] = relationship(
        back_populates="site", cascade="all, delete-orphan", passive_deletes=True
    )


class SiteIdRow(Base):
    __tablename__ = "site_ids"
    __table_args__ = (Index("idx_site_ids_station", "station_num"),)

    id: Mapped[str] = mapped_column(String, primary_key=True)
    station_num: Mapped[int] = mapped_column(
        ForeignKey("sites.station_num", ondelete="CASCADE"), nullable=False
    )

    site: Mapped[SiteRow] = relationship(back_populates="site_ids")


class FileRow(Base):
    __tablename__ = "files"
    __table_args__ = (
        UniqueConstraint("station_num", "model", "init_time", name="uq_files_station_model_init"),
        Index("idx_files_time_ranges", "model", "station_num", "init_time", "end_time"),
    )

    row_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    station_num: Mapped[int] = mapped_column(
        ForeignKey("sites.station_num", ondelete="CASCADE"), nullable=False
    )
    model: Mapped[str] = mapped_column(String, nullable=False)
    init_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    file_name: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    # id the file was filed under; ids drift over time so this is a snapshot
    site_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    lat: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    lon: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    elevation_m: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    site: Mapped[SiteRow] = relationship(back_populates="files")
