from .celery import CELERY_IMPORTS, celery_app

__all__ = ["CELERY_IMPORTS", "celery_app"]
