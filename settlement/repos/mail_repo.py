# settlement/repos/mail_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from settlement.data.models.mail import MailModel


class MailRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_mail(self, mail: MailModel) -> MailModel:
        self.db.add(mail)
        self.db.flush()
        return mail

    def get_mail(self, mail_id: str) -> MailModel | None:
        return self.db.get(MailModel, mail_id)

    def list_pending(self, limit: int = 100) -> list[MailModel]:
        return list(
            self.db.execute(
                select(MailModel)
                .where(MailModel.sent_at.is_(None))
                .order_by(MailModel.created_at)
                .limit(limit)
            ).scalars()
        )

