"""Logging filter that stamps records with the current request id."""

from logging import Filter, LogRecord

from .middleware import REQUEST_ID_CTX


class RequestIdFilter(Filter):
    """Set ``record.request_id`` from ``REQUEST_ID_CTX``.

    Records emitted outside a request (management commands, tests) get the
    context var default ``"-"``, so the JSON formatter can always reference
    ``%(request_id)s``. Records that already carry a ``request_id`` through
    ``extra=`` keep it.
    """

    def filter(self, record: LogRecord) -> bool:
        if not getattr(record, "request_id", None):
            record.request_id = REQUEST_ID_CTX.get()
        return True
