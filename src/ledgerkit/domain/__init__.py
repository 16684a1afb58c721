"""Domain layer for ledgerkit application."""

# Services are loaded lazily; ledgerkit.database imports domain entities, and
# the services import ledgerkit.database.
_SERVICES = {
    "AccountService": "ledgerkit.domain.account",
    "JournalService": "ledgerkit.domain.journal",
    "PostingEngine": "ledgerkit.domain.posting",
    "ReportService": "ledgerkit.domain.reports",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        from importlib import import_module

        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
