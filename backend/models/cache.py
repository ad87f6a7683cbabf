# backend/models/cache.py
from sqlalchemy import Column, String, DateTime, JSON
from database import Base

# Key-value row backing the TTL cache; rows past expires_at are treated as absent
class CacheEntry(Base):
    __tablename__ = "cache_entries"

    key = Column(String(255), primary_key=True)
    value = Column(JSON, nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)
