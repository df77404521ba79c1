"""Game domain services: registry, economy ledger, tokens and the catalog.

Routes and socket handlers import from here, keeping transport concerns
separated from the game rules. Every multi-step write goes through
``atomic`` so a failure never leaves partial state behind.
"""

from contextlib import contextmanager

from worldstage import db


@contextmanager
def atomic():
    """Commit the session on success, roll it back on any exception."""
    try:
        yield db.session
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
