"""Main entry point for the radosgw operator.

Run with ``kopf run -m radosgw_operator.main``.
"""

from __future__ import annotations

import os
from typing import Any

import kopf

from . import handlers  # noqa: F401  (registers the kopf handlers)
from . import health
from . import logging as structured_logging
from .tracing import initialize_tracing


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_: Any) -> None:
    """Configure the operator."""
    structured_logging.setup_structured_logging()
    initialize_tracing()

    # Use annotations so progress bookkeeping does not conflict with status updates
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage()
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage()

    settings.posting.level = 0
    settings.networking.request_timeout = 30.0
    settings.execution.max_workers = int(os.getenv("MAX_WORKERS", "4"))

    health.start_metrics_server(int(os.getenv("METRICS_PORT", "8080")))
