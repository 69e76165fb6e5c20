# settlement/data/transaction.py
"""
Optymistyczna transakcja: odczyt -> obliczenia -> warunkowe zapisy -> commit.

Zapisy warunkowe (UPDATE ... WHERE version = :stara) zglaszaja
ConcurrencyConflict gdy nic nie zaktualizuja. Kolizja klucza przy commicie
jest traktowana tak samo. Cala jednostka pracy jest wtedy wycofywana
i wykonywana od nowa na swiezym odczycie.
"""
from typing import Callable, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from settlement.domain.errors import ConcurrencyConflict
from settlement.utils.logging import get_logger
from settlement.utils.retry import transaction_retrying

logger = get_logger(__name__)

T = TypeVar("T")


def run_in_transaction(
    db: Session,
    work: Callable[[], T],
    *,
    name: str = "transaction",
    max_attempts: int | None = None,
) -> T:
    for attempt in transaction_retrying(max_attempts):
        with attempt:
            number = attempt.retry_state.attempt_number
            try:
                result = work()
                db.commit()
            except IntegrityError as e:
                db.rollback()
                logger.warning(f"{name}: integrity conflict on attempt {number}: {e.orig}")
                raise ConcurrencyConflict() from e
            except ConcurrencyConflict:
                db.rollback()
                logger.warning(f"{name}: concurrent modification on attempt {number}, retrying")
                raise
            except Exception:
                db.rollback()
                raise
            return result
