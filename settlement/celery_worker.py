# settlement/celery_worker.py
from celery import Celery

from settlement.utils.settings import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    CELERY_TASK_ALWAYS_EAGER,
    MAIL_SWEEP_SECONDS,
)

celery_app = Celery(
    "settlement",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# explicite importuj taski, zeby Celery je zarejestrowal
celery_app.conf.imports = (
    "settlement.tasks.recalculate",
    "settlement.tasks.outbox",
    "settlement.services.notification_service",
)

# trigger przeliczenia musi byc dostarczony co najmniej raz
celery_app.conf.task_acks_late = True
celery_app.conf.task_reject_on_worker_lost = True
celery_app.conf.task_always_eager = CELERY_TASK_ALWAYS_EAGER

celery_app.conf.beat_schedule = {
    "dispatch-pending-mail": {
        "task": "settlement.tasks.outbox.dispatch_pending_mail_task",
        "schedule": MAIL_SWEEP_SECONDS,
    },
}

celery_app.conf.timezone = "UTC"
