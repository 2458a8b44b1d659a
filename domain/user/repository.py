"""
用户仓储接口 - 定义数据访问的抽象接口
"""
from abc import abstractmethod
from typing import Optional

from domain.common.repository import Repository

from .entity import User


class UserRepository(Repository[User]):
    """用户仓储抽象接口 - 只定义能做什么，不管怎么做"""

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """根据邮箱获取用户"""
