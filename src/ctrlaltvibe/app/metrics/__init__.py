"""Prometheus exposition, aggregated across uvicorn workers."""

import os
from pathlib import Path

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    CollectorRegistry,
    generate_latest,
    multiprocess,
)
from starlette.responses import Response

_MULTIPROC_ENV = "PROMETHEUS_MULTIPROC_DIR"


def setup_metrics(multiproc_dir: str) -> None:
    """Point prometheus_client at `multiproc_dir`, removing samples of dead workers."""
    path = Path(multiproc_dir)
    path.mkdir(parents=True, exist_ok=True)
    for stale in path.glob("*.db"):
        stale.unlink()
    os.environ[_MULTIPROC_ENV] = str(path)


def get_metrics_response() -> Response:
    if os.environ.get(_MULTIPROC_ENV):
        registry = CollectorRegistry()
        multiprocess.MultiProcessCollector(registry)
    else:
        registry = REGISTRY
    return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)
