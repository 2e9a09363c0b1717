"""Property listing (post) table model."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    SmallInteger,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base


class Post(Base):
    """Real-estate classified published by a user."""

    __tablename__ = "posts"
    __table_args__ = (
        CheckConstraint("bedrooms >= 0", name="ck_posts_bedrooms_unsigned"),
        CheckConstraint("bathrooms >= 0", name="ck_posts_bathrooms_unsigned"),
        Index("idx_posts_city", "city"),
        Index("idx_posts_sector", "sector"),
        Index("idx_posts_price", "price"),
        Index("idx_posts_user", "user_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    # City slug; not validated against the cities table.
    city: Mapped[str] = mapped_column(String(255), nullable=False)
    sector: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    product: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(255), nullable=False)
    bedrooms: Mapped[int] = mapped_column(
        SmallInteger, nullable=False, default=0, server_default="0"
    )
    bathrooms: Mapped[int] = mapped_column(
        SmallInteger, nullable=False, default=0, server_default="0"
    )
    area: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    address_maps: Mapped[str] = mapped_column(String(255), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    image: Mapped[str | None] = mapped_column(String(255), nullable=True)
    likes: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
