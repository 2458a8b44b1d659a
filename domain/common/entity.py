"""
领域实体公共行为
"""
from __future__ import annotations

from dataclasses import fields
from datetime import datetime, timezone
from typing import Any, Mapping

# 由服务端维护的字段，不允许通过 apply_changes 修改
_SERVER_MANAGED = frozenset({"id", "created_at", "updated_at"})


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EntityMixin:
    """为 dataclass 实体提供部分更新与统一校验入口。"""

    def validate(self) -> None:
        """子类覆盖：业务规则校验，失败抛出 ValueError"""

    def apply_changes(self, changes: Mapping[str, Any]) -> None:
        """业务规则：按字段部分更新，更新后重新校验"""
        names = {f.name for f in fields(self)}  # type: ignore[arg-type]
        for key, value in changes.items():
            if key in names and key not in _SERVER_MANAGED:
                setattr(self, key, value)
        self.validate()
        if "updated_at" in names:
            setattr(self, "updated_at", utcnow())
