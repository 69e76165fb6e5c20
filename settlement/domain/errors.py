# settlement/domain/errors.py
"""
Taksonomia bledow domeny rozliczen koszyka.

Kazdy blad niesie status HTTP i kod maszynowy, routery tlumacza go na
HTTPException. Tylko ConcurrencyConflict jest ponawiany (przez run_in_transaction),
reszta jest terminalna i przerywa transakcje.
"""


class SettlementError(Exception):
    status_code = 500
    code = "internal"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthenticated(SettlementError):
    status_code = 401
    code = "unauthenticated"


class InvalidArgument(SettlementError):
    status_code = 400
    code = "invalid-argument"


class NotFound(SettlementError):
    status_code = 404
    code = "not-found"


class FailedPrecondition(SettlementError):
    status_code = 409
    code = "failed-precondition"


class ConcurrencyConflict(SettlementError):
    status_code = 503
    code = "aborted"

    def __init__(self, message: str = "Concurrent modification detected, please try again"):
        super().__init__(message)


class ServiceUnavailable(SettlementError):
    status_code = 503
    code = "unavailable"
