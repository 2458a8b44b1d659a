"""本地启动 Celery worker：python -m infrastructure.tasks.worker

生产环境直接使用 celery CLI：
    celery -A infrastructure.tasks worker -Q notifications,default
"""
from __future__ import annotations

import sys

from .config.celery import celery_app


def main() -> None:
    argv = ["worker", "--loglevel=INFO", "--queues=notifications,default", *sys.argv[1:]]
    celery_app.worker_main(argv=argv)


if __name__ == "__main__":
    main()
