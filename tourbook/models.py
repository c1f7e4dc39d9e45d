from sqlalchemy import String, JSON, DateTime, func
from sqlalchemy.orm import mapped_column, DeclarativeBase


class Base(DeclarativeBase): ...


# ---------- Cart storage ----------
class CartEntry(Base):
    """One keyed entry holding a whole cart as a JSON array"""
    __tablename__ = "cart_entries"
    key     = mapped_column(String(128), primary_key=True)
    value   = mapped_column(JSON, nullable=False, default=list)
    updated = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())
