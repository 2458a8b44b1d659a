"""
用户数据库模型 - SQLAlchemy ORM模型
注意：这是基础设施层的实现细节，不是领域模型
"""
from sqlalchemy import Column, String

from .base import Base, TimestampMixin


class UserModel(TimestampMixin, Base):
    """用户表 - id 由外部身份提供方分配"""
    __tablename__ = "users"

    id = Column(String(64), primary_key=True)
    email = Column(String(255), unique=True, index=True, nullable=True, comment="邮箱")
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    profile_image_url = Column(String(512), nullable=True)
    role = Column(String(20), default="user", nullable=False, comment="user | moderator | admin")

    def __repr__(self):
        return f"<UserModel(id={self.id}, email='{self.email}', role='{self.role}')>"
