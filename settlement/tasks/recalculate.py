# settlement/tasks/recalculate.py
from settlement.celery_worker import celery_app
from settlement.data.database import SessionLocal
from settlement.services.total_recalculator import TotalRecalculator
from settlement.utils.logging import get_logger

logger = get_logger(__name__)


@celery_app.task(name="settlement.tasks.recalculate.recalculate_cart_totals_task")
def recalculate_cart_totals_task(cart_id: str):
    """
    Trigger na kazdy zapis w cart_items.
    Bledy sa logowane i polykane, nastepna zmiana pozycji (albo powtorzony
    trigger) i tak przeliczy wszystko od nowa.
    """
    db = SessionLocal()
    try:
        summary = TotalRecalculator(db).recompute(cart_id)
        return summary.as_dict()
    except Exception as e:
        logger.error(f"[calculate_cart_total] cart {cart_id} failed: {e}", exc_info=True)
        return None
    finally:
        db.close()
