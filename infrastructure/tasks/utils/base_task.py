"""Celery 任务基类：统一记录任务结果"""
from __future__ import annotations

from celery import Task

from core.logging_config import get_logger

logger = get_logger(__name__)


class BaseTask(Task):
    """通知任务失败只记日志，不影响已完成的比赛事件写入与广播"""

    def _log(self, level: str, event: str, task_id: str, **extra) -> None:
        getattr(logger, level)(event, task_id=task_id, task_name=self.name, retries=self.request.retries, **extra)

    def on_failure(self, exc, task_id, args, kwargs, einfo):  # type: ignore[override]
        self._log("error", "celery_task_failure", task_id, exc=str(exc))
        super().on_failure(exc, task_id, args, kwargs, einfo)

    def on_retry(self, exc, task_id, args, kwargs, einfo):  # type: ignore[override]
        self._log("warning", "celery_task_retry", task_id, exc=str(exc))
        super().on_retry(exc, task_id, args, kwargs, einfo)

    def on_success(self, retval, task_id, args, kwargs):  # type: ignore[override]
        self._log("info", "celery_task_success", task_id, result=retval)
        super().on_success(retval, task_id, args, kwargs)
