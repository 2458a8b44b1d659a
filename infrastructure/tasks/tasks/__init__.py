"""Celery 任务模块；导入即注册"""
from .email import send_notification_email

__all__ = ["send_notification_email"]
