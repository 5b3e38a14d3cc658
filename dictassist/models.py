from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class MacroRow(Base):
    __tablename__ = "transcription_macros"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, nullable=True)  # NULL for global macros
    category_id = Column(String, nullable=True)

    name = Column(String, nullable=False)  # stored trimmed + lower-case
    replacement_text = Column(Text, nullable=False)

    is_global = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    is_smart = Column(Boolean, nullable=False, default=False)
    smart_context = Column(JSON, nullable=True)  # [{"bodyPart": ..., "text": ...}, ...]

    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("ix_macros_user_id", "user_id"),
        Index("ix_macros_is_global", "is_global"),
    )
