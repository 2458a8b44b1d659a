"""
应用服务公共工具
"""
from contextlib import contextmanager
from typing import Iterator

from domain.common.exceptions import DomainValidationException


@contextmanager
def domain_rules() -> Iterator[None]:
    """把实体校验抛出的 ValueError 转为领域校验异常"""
    try:
        yield
    except ValueError as exc:
        raise DomainValidationException(str(exc)) from exc
