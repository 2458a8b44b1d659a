"""
数据库模型基类（SQLAlchemy 2.0 风格）
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime
from sqlalchemy.orm import DeclarativeBase


def generate_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class CreatedAtMixin:
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, comment="创建时间")


class TimestampMixin(CreatedAtMixin):
    updated_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
        comment="更新时间",
    )


# 元数据对象用于建表
metadata = Base.metadata
