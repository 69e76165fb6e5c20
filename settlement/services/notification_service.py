# settlement/services/notification_service.py
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy.orm import Session

from settlement.celery_worker import celery_app
from settlement.data.database import SessionLocal
from settlement.data.models.mail import MailModel
from settlement.domain.sanitize import LineSnapshot
from settlement.repos.mail_repo import MailRepo
from settlement.services import mail_templates
from settlement.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Powiadomienia przez outbox.

    enqueue_* tylko dodaje wiersz do tabeli mail w biezacej transakcji,
    mail istnieje wiec wtedy i tylko wtedy gdy zmiana sie zacommitowala.
    Wysylka idzie pozniej przez Celery (dispatch) albo przez okresowy sweep.
    """

    def __init__(self, db: Session):
        self.repo = MailRepo(db)

    def enqueue_order_confirmation(
        self,
        to: str,
        order_id: str,
        customer_name: str,
        lines: list[LineSnapshot],
        subtotal: Decimal,
        discount: Decimal,
        total: Decimal,
    ) -> MailModel:
        subject, html = mail_templates.render_order_confirmation(
            order_id, customer_name, lines, subtotal, discount, total
        )
        return self.repo.add_mail(MailModel(recipient=to, subject=subject, html=html, order_id=order_id))

    def enqueue_status_change(self, to: str, order_id: str, customer_name: str, status: str, items: list[dict]) -> MailModel | None:
        if status == "shipped":
            subject, html = mail_templates.render_order_shipped(order_id, customer_name, items)
        elif status == "cancelled":
            subject, html = mail_templates.render_order_cancelled(order_id, customer_name)
        else:
            return None
        return self.repo.add_mail(MailModel(recipient=to, subject=subject, html=html, order_id=order_id))

    @staticmethod
    def dispatch(mail_id: str):
        """Po commicie. Blad brokera nie jest krytyczny, sweep dostarczy mail pozniej."""
        try:
            send_mail_task.delay(mail_id)
        except Exception as e:
            logger.warning(f"Could not dispatch mail {mail_id}, leaving it for the outbox sweep: {e}")


def deliver_mail(db: Session, mail_id: str) -> bool:
    """Wysylka jest idempotentna: mail z ustawionym sent_at jest pomijany."""
    repo = MailRepo(db)
    mail = repo.get_mail(mail_id)
    if mail is None:
        logger.warning(f"[MAIL] {mail_id} not found")
        return False
    if mail.sent_at is not None:
        return False

    mail.attempts += 1
    # prawdziwy transport (SMTP / SES) poza zakresem, tylko logujemy
    logger.info(f"[MAIL] to={mail.recipient} subject={mail.subject!r} order={mail.order_id}")
    mail.sent_at = datetime.now(timezone.utc)
    db.commit()
    return True


@celery_app.task(name="settlement.services.notification_service.send_mail_task")
def send_mail_task(mail_id: str):
    db = SessionLocal()
    try:
        sent = deliver_mail(db, mail_id)
        return {"mail_id": mail_id, "sent": sent}
    finally:
        db.close()
