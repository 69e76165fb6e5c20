from settlement.data.models.mail import MailModel
from settlement.services.notification_service import NotificationService, deliver_mail
from settlement.tasks.outbox import dispatch_pending_mail_task
from tests.helpers import reload


def test_sweep_delivers_pending_mail(db):
    db.add_all(
        [
            MailModel(id="m1", recipient="a@example.com", subject="One", html="<p>1</p>"),
            MailModel(id="m2", recipient="b@example.com", subject="Two", html="<p>2</p>"),
        ]
    )
    db.commit()

    result = dispatch_pending_mail_task.delay().get()

    assert result == {"sent": 2}
    assert reload(db, MailModel, "m1").sent_at is not None
    assert reload(db, MailModel, "m2").sent_at is not None


def test_delivery_is_idempotent(db):
    db.add(MailModel(id="m1", recipient="a@example.com", subject="One", html="<p>1</p>"))
    db.commit()

    assert deliver_mail(db, "m1") is True
    assert deliver_mail(db, "m1") is False
    assert reload(db, MailModel, "m1").attempts == 1


def test_dispatch_failure_leaves_mail_for_sweep(db, monkeypatch):
    db.add(MailModel(id="m1", recipient="a@example.com", subject="One", html="<p>1</p>"))
    db.commit()

    class BrokerDown:
        def delay(self, mail_id):
            raise ConnectionError("broker unreachable")

    from settlement.services import notification_service

    monkeypatch.setattr(notification_service, "send_mail_task", BrokerDown())

    NotificationService.dispatch("m1")

    assert reload(db, MailModel, "m1").sent_at is None
    assert dispatch_pending_mail_task.delay().get() == {"sent": 1}
