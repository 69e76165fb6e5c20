# settlement/tasks/outbox.py
from settlement.celery_worker import celery_app
from settlement.data.database import SessionLocal
from settlement.repos.mail_repo import MailRepo
from settlement.services.notification_service import deliver_mail
from settlement.utils.logging import get_logger

logger = get_logger(__name__)


@celery_app.task(name="settlement.tasks.outbox.dispatch_pending_mail_task")
def dispatch_pending_mail_task():
    """Sweep outboxa: dostarcza maile, ktorych dispatch po commicie sie nie udal."""
    logger.info("Outbox sweep started")

    db = SessionLocal()
    sent = 0
    try:
        pending = [m.id for m in MailRepo(db).list_pending()]
        logger.info(f"Found {len(pending)} undelivered mails")

        for mail_id in pending:
            try:
                if deliver_mail(db, mail_id):
                    sent += 1
            except Exception as e:
                db.rollback()
                logger.warning(f"Failed to deliver mail {mail_id}: {e}")
        return {"sent": sent}
    finally:
        db.close()
