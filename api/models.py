"""
SQLAlchemy models for FuelPool database.
"""

from sqlalchemy import (
    Column,
    String,
    Float,
    Integer,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    JSON,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
import uuid

from api.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class APIKey(Base):
    """API key for authentication."""

    __tablename__ = "api_keys"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    key_hash = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    last_used_at = Column(DateTime, nullable=True)
    expires_at = Column(DateTime, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    extra_metadata = Column("metadata", JSON, nullable=True)

    def __repr__(self):
        return f"<APIKey(name='{self.name}', active={self.is_active})>"


class RouteRow(Base):
    """Voyage route with GHG intensity and fuel data."""

    __tablename__ = "routes"

    id = Column(UUID(as_uuid=False), primary_key=True, default=lambda: str(uuid.uuid4()))
    route_id = Column(String(50), nullable=False, unique=True, index=True)
    vessel_type = Column(String(50), nullable=False)
    fuel_type = Column(String(50), nullable=False)
    year = Column(Integer, nullable=False, index=True)
    ghg_intensity = Column(Float, nullable=False)
    fuel_consumption = Column(Float, nullable=False)
    distance = Column(Float, nullable=False)
    total_emissions = Column(Float, nullable=False, default=0.0)
    is_baseline = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    def __repr__(self):
        return f"<RouteRow(route_id='{self.route_id}', baseline={self.is_baseline})>"


class ComplianceBalanceRow(Base):
    """Cached CB snapshot per ship/year. Overwritten on recompute."""

    __tablename__ = "compliance_balances"

    id = Column(UUID(as_uuid=False), primary_key=True, default=lambda: str(uuid.uuid4()))
    ship_id = Column(String(50), nullable=False)
    year = Column(Integer, nullable=False)
    cb_gco2eq = Column(Float, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("ship_id", "year", name="uq_compliance_ship_year"),
    )

    def __repr__(self):
        return f"<ComplianceBalanceRow(ship_id='{self.ship_id}', year={self.year})>"


class BankEntryRow(Base):
    """Banking ledger line. Never updated or deleted."""

    __tablename__ = "bank_entries"

    id = Column(UUID(as_uuid=False), primary_key=True, default=lambda: str(uuid.uuid4()))
    ship_id = Column(String(50), nullable=False)
    year = Column(Integer, nullable=False)
    amount_gco2eq = Column(Float, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (
        Index("ix_bank_entries_ship", "ship_id"),
    )

    def __repr__(self):
        return f"<BankEntryRow(ship_id='{self.ship_id}', amount={self.amount_gco2eq})>"


class PoolRow(Base):
    """Compliance pool. Immutable once created."""

    __tablename__ = "pools"

    id = Column(UUID(as_uuid=False), primary_key=True, default=lambda: str(uuid.uuid4()))
    year = Column(Integer, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    members = relationship(
        "PoolMemberRow",
        back_populates="pool",
        cascade="all, delete-orphan",
        order_by="PoolMemberRow.ship_id",
    )

    def __repr__(self):
        return f"<PoolRow(id={self.id}, year={self.year})>"


class PoolMemberRow(Base):
    """Allocation outcome for one ship in a pool."""

    __tablename__ = "pool_members"

    pool_id = Column(
        UUID(as_uuid=False),
        ForeignKey("pools.id", ondelete="CASCADE"),
        primary_key=True,
    )
    ship_id = Column(String(50), primary_key=True)
    cb_before = Column(Float, nullable=False)
    cb_after = Column(Float, nullable=False)

    pool = relationship("PoolRow", back_populates="members")

    def __repr__(self):
        return f"<PoolMemberRow(pool_id={self.pool_id}, ship_id='{self.ship_id}')>"
