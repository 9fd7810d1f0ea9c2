"""
Key/value options stored in the database.

The admin form writes its whole settings mapping under one option name, so
the value column holds arbitrary JSON.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func

from aadsso.db.base_class import Base


class SiteOption(Base):
    __tablename__ = "site_options"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(191), unique=True, index=True, nullable=False)
    value = Column(JSON, nullable=True)

    # Metadata
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

    def __repr__(self):
        return f"<SiteOption name={self.name}>"
