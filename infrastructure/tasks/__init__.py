"""Celery 异步任务：比赛事件通知邮件。

应用层只依赖 TaskDispatcher，不直接接触 Celery。
"""
from .config.celery import celery_app
from .utils.dispatcher import TaskDispatcher

__all__ = ["TaskDispatcher", "celery_app"]
