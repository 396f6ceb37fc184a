# grocery/celery_worker.py
from celery import Celery

from grocery.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND

celery_app = Celery(
    "grocery",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# register tasks with the worker
celery_app.conf.imports = (
    "grocery.services.notification_service",
)

celery_app.conf.timezone = "UTC"
