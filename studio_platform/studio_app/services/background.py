"""Fire-and-forget background work for notifications and follow-up calls."""

from __future__ import annotations

from threading import Thread
from typing import Any, Callable

from flask import current_app

from ..extensions import db


def dispatch(func: Callable[..., Any], *args: Any, description: str, **kwargs: Any) -> None:
    """Run ``func`` outside the caller's response path.

    Failures are logged with ``description`` and never propagate. Pass ids
    rather than ORM instances; the worker runs on its own session.
    """

    app = current_app._get_current_object()

    if app.config.get("BACKGROUND_TASKS_INLINE"):
        try:
            func(*args, **kwargs)
        except Exception:
            db.session.rollback()
            app.logger.exception("Background task failed", extra={"task": description})
        return

    def _worker():
        with app.app_context():
            try:
                func(*args, **kwargs)
            except Exception:
                db.session.rollback()
                app.logger.exception("Background task failed", extra={"task": description})
            finally:
                db.session.remove()

    Thread(target=_worker, name=f"bg-{description}", daemon=True).start()
