"""
FastAPI server for kgrep.

This module exposes the two grep operations over HTTP as a small JSON API.
The grep calls block on the Kubernetes API, so every request runs them in the
event loop's default executor.

Routes:
- GET /api/resources: grep a typed kind (kind_label) or any kind (kind, api_version)
- GET /api/logs: grep container logs
- GET /api/version: kgrep version
- GET /healthz: liveness

Errors map to HTTP status codes: invalid input (ConfigurationError,
UnsupportedSortError) is a 400, any other kgrep failure a 502 carrying the
error message.

Example:
    ```python
    await run_server(kubeconfig=None, context=None, host="0.0.0.0", port=8080)
    ```

    ```bash
    curl 'http://localhost:8080/api/logs?namespace=prod&pod=api&pattern=ERROR&sort=message'
    ```
"""

import asyncio
import logging
import os
from dataclasses import asdict
from functools import partial
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Query

from . import __version__
from .constants import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_UVICORN_LOG_LEVEL, ENV_UVICORN_LEVEL
from .exceptions import KgrepError, ConfigurationError, UnsupportedSortError
from .models import SortOrder
from .service import Kgrep
from .validation import parse_namespaces, settings_from_env, validate_api_version

log = logging.getLogger('kgrep')


def _log_exception(msg: str, exc: Exception, level: int = logging.WARNING):
    """Log an exception with proper formatting."""
    log.log(level, f"{msg}: {exc.__class__.__name__}: {exc}")


class Hub:
    """
    Holds the Kgrep instance the routes use.

    Attributes:
        kgrep: Grep operations bound to the cluster (None until the server starts)
    """

    def __init__(self):
        self.kgrep: Optional[Kgrep] = None

    async def run(self, operation: str, *args, **kwargs) -> Any:
        """Run a blocking Kgrep operation in the default executor, mapping errors to HTTP errors."""
        if self.kgrep is None:
            raise HTTPException(status_code=503, detail="Not connected to a cluster")
        loop = asyncio.get_event_loop()
        try:
            func = getattr(self.kgrep, operation)
            return await loop.run_in_executor(None, partial(func, *args, **kwargs))
        except (ConfigurationError, UnsupportedSortError) as e:
            raise HTTPException(status_code=400, detail=str(e))
        except KgrepError as e:
            _log_exception("[server] grep failed", e)
            raise HTTPException(status_code=502, detail=str(e))


hub = Hub()
app = FastAPI(title="kgrep", version=__version__)


@app.get("/healthz")
async def healthz():
    return {'ok': True}


@app.get("/api/version")
async def version():
    return {'version': __version__}


@app.get("/api/resources")
async def grep_resources(
    pattern: str,
    namespace: Optional[str] = None,
    kind_label: Optional[str] = None,
    kind: Optional[str] = None,
    api_version: Optional[str] = None,
) -> Dict[str, Any]:
    try:
        api_version = validate_api_version(api_version)
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    lines = await hub.run("grep_resources", namespace, pattern,
                          kind_label=kind_label, api_version=api_version, kind=kind)
    ordered = sorted(lines, key=lambda line: (line.resource, line.line_number))
    return {'pattern': pattern, 'count': len(ordered), 'matches': [asdict(line) for line in ordered]}


@app.get("/api/logs")
async def grep_logs(
    pattern: str,
    namespace: Optional[str] = Query(None, description="Namespace(s), comma-separated"),
    pod: Optional[str] = None,
    sort: str = SortOrder.BY_DISCOVERY_ORDER.value,
) -> Dict[str, Any]:
    try:
        namespaces = parse_namespaces(namespace)
        sort_order = SortOrder.parse(sort)
    except (ConfigurationError, UnsupportedSortError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    messages = await hub.run("grep_logs", namespaces or None, pod, pattern, sort_order)
    return {'pattern': pattern, 'count': len(messages), 'matches': [asdict(m) for m in messages]}


async def run_server(
    kubeconfig: Optional[str],
    context: Optional[str],
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> None:
    """Connect to the cluster and serve the API until interrupted."""
    loop = asyncio.get_event_loop()
    try:
        hub.kgrep = await loop.run_in_executor(None, Kgrep.connect, kubeconfig, context, settings_from_env())
    except KgrepError as e:
        _log_exception("[server] Failed to load Kubernetes configuration", e)
        raise

    log.info(f"[server] serving on http://{host}:{port}, default namespace={hub.kgrep.default_namespace}")

    import uvicorn
    uvicorn_log_level = os.getenv(ENV_UVICORN_LEVEL, DEFAULT_UVICORN_LOG_LEVEL)
    config = uvicorn.Config(app, host=host, port=port, log_level=uvicorn_log_level)
    server = uvicorn.Server(config)
    await server.serve()
