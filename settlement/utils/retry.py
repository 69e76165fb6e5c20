# settlement/utils/retry.py
from tenacity import retry, Retrying, stop_after_attempt, wait_exponential, retry_if_exception_type
import requests

from settlement.domain.errors import ConcurrencyConflict
from settlement.utils.settings import TX_MAX_ATTEMPTS


def http_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3),
        retry=retry_if_exception_type(requests.RequestException),
    )


def transaction_retrying(max_attempts: int | None = None) -> Retrying:
    #tylko konflikty wspolbieznosci sa ponawiane, bledy biznesowe leca od razu
    return Retrying(
        reraise=True,
        stop=stop_after_attempt(max_attempts or TX_MAX_ATTEMPTS),
        wait=wait_exponential(multiplier=0.05, min=0.05, max=1),
        retry=retry_if_exception_type(ConcurrencyConflict),
    )
