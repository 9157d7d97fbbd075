"""
Datasette plugin exposing reorder-bot as a single trigger route.

POST /-/reorder/notify checks stock levels, sends one quote request per
matched supplier and returns a JSON summary of what was sent.
"""

import logging
from pathlib import Path

from datasette import Response, hookimpl
from datasette.utils.asgi import Request

from reorder_bot.config import PLUGIN_NAME, ReorderConfig
from reorder_bot.dispatch import (
    DispatchError,
    DispatchRejected,
    DispatchTransportFailure,
)
from reorder_bot.models import StockDatabase
from reorder_bot.pipeline import ReorderPipeline

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Plugin Configuration
# -----------------------------------------------------------------------------


def get_config(datasette) -> ReorderConfig:
    """Get reorder configuration from datasette.yaml."""
    return ReorderConfig.from_plugin_config(datasette.plugin_config(PLUGIN_NAME))


def ensure_db_exists(db_path: Path) -> int:
    """Ensure the database exists with the correct schema.

    Uses the migration system to create/update the database.
    This is idempotent - safe to call multiple times.
    Returns the schema version now in place.
    """
    from datasette_reorder_notify.migrations import get_current_version, run_migrations

    run_migrations(db_path, verbose=False)
    version = get_current_version(db_path)
    logger.info(f"Reorder database {db_path} at schema version {version}")
    return version


def build_pipeline(datasette) -> ReorderPipeline:
    """Create the pipeline for one triggered run."""
    config = get_config(datasette)
    return ReorderPipeline(config, StockDatabase(config.db_path))


# -----------------------------------------------------------------------------
# Actor Helpers
# -----------------------------------------------------------------------------


def can_trigger(request: Request) -> bool:
    """Staff and the root actor may trigger a run."""
    actor = request.actor
    if not actor:
        return False
    return actor.get("principal_type") == "staff" or actor.get("id") == "root"


def dispatch_error_body(error: DispatchError) -> dict:
    """Describe a failed run for the JSON response."""
    body = {
        "ok": False,
        "error": str(error),
        "supplier": error.supplier,
        "email": error.email,
        "sent": [n.to_dict() for n in error.sent],
    }
    if isinstance(error, DispatchRejected):
        body["reason"] = "rejected"
        body["status_code"] = error.status_code
        body["provider_message"] = error.provider_message
    elif isinstance(error, DispatchTransportFailure):
        body["reason"] = "transport_failure"
    return body


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------


async def reorder_notify(request: Request, datasette) -> Response:
    """Check stock and send quote requests to suppliers."""
    if request.method != "POST":
        return Response.text("Method not allowed", status=405)

    if not can_trigger(request):
        return Response.text("Unauthorized", status=403)

    logger.info("Reorder notification triggered")
    pipeline = build_pipeline(datasette)

    try:
        sent = await pipeline.run()
    except DispatchError as e:
        logger.error(f"Reorder run aborted at supplier {e.supplier}: {e}")
        return Response.json(dispatch_error_body(e), status=502)

    return Response.json(
        {
            "ok": True,
            "notifications": [n.to_dict() for n in sent],
        }
    )


# -----------------------------------------------------------------------------
# Datasette Hooks
# -----------------------------------------------------------------------------


@hookimpl
def register_routes():
    """Register plugin routes with Datasette."""
    return [
        (r"^/-/reorder/notify$", reorder_notify),
    ]


@hookimpl
def skip_csrf(datasette, scope):
    """
    Skip CSRF for the reorder API routes.

    They are API-style calls with no form page to obtain a token from,
    protected by the actor check instead.
    """
    if scope.get("path", "").startswith("/-/reorder/"):
        return True
    return None


@hookimpl
def startup(datasette):
    """Apply schema migrations to the configured database on startup."""
    ensure_db_exists(get_config(datasette).db_path)
