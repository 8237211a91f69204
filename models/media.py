import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import UUID

from database import Base


class MediaAsset(Base):
    """Uploaded or AI-generated file stored in the ``media`` bucket."""

    __tablename__ = "media_assets"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    alt_text = Column(String(512), nullable=True)
    filename = Column(String(255), nullable=False)
    file_size = Column(Integer, nullable=True)
    mime_type = Column(String(127), nullable=False, index=True)
    width = Column(Integer, nullable=True)
    height = Column(Integer, nullable=True)
    original_url = Column(String(1024), nullable=False)
    optimized_url = Column(String(1024), nullable=True)
    thumbnail_url = Column(String(1024), nullable=True)
    storage_path = Column(String(512), nullable=True)
    generation_prompt = Column(Text, nullable=True)
    generation_style = Column(String(64), nullable=True)
    is_generated = Column(Boolean, nullable=False, default=False)
    created_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
