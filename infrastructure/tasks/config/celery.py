"""Celery application configuration"""
from __future__ import annotations

from celery import Celery
from kombu import Queue

from core.config import settings
from core.logging_config import get_logger


# Task modules are discovered via this tuple so new packages only need to be
# listed here rather than altering the runtime imports scattered elsewhere.
CELERY_IMPORTS = (
    "infrastructure.tasks.tasks",
)


celery_app = Celery("cs2stats")

celery_app.conf.update(
    broker_url=settings.celery.broker_url or settings.redis.url,
    result_backend=settings.celery.result_backend or settings.redis.url,
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    # 通知类任务不需要结果
    task_ignore_result=True,
    worker_prefetch_multiplier=1,
    task_default_queue="default",
    task_default_retry_delay=5,
    task_queues=(
        Queue("default"),
        Queue("notifications"),
    ),
    task_routes={
        "infrastructure.tasks.tasks.email.*": {"queue": "notifications"},
    },
)

celery_app.conf.imports = CELERY_IMPORTS

environment = (settings.ENVIRONMENT or "production").lower()
if settings.celery.task_always_eager or environment in {"development", "dev", "test", "testing"}:
    celery_app.conf.task_always_eager = True
    # eager 模式下任务异常不回抛给调用方，由 BaseTask 记录
    celery_app.conf.task_eager_propagates = False


logger = get_logger(__name__)


@celery_app.on_after_configure.connect
def _log_configuration(sender, **kwargs):
    logger.info(
        "celery_configured",
        broker=sender.conf.broker_url,
        eager=bool(sender.conf.task_always_eager),
    )
