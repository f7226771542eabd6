"""
Minimal backend HTTP server for Stream Sentinel.

Embeds one AnomalyEngine and one DashboardFeed and exposes them to a
dashboard frontend without introducing new dependencies.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Dict, Optional, Tuple

from dotenv import load_dotenv

from backend.feed import DashboardFeed
from src.anomaly import AnomalyEngine, SimulationKind, simulate_anomaly
from src.core.exceptions import DataValidationError, EngineClosedError
from src.core.logging_config import setup_logging

load_dotenv()

logger = logging.getLogger("backend")

ENGINE: Optional[AnomalyEngine] = None
FEED: Optional[DashboardFeed] = None

Response = Tuple[int, Dict[str, Any]]


def _runtime() -> Tuple[AnomalyEngine, DashboardFeed]:
    global ENGINE, FEED
    if ENGINE is None or ENGINE.closed:
        ENGINE = AnomalyEngine()
        FEED = DashboardFeed(ENGINE)
    return ENGINE, FEED


def reset_runtime(engine: Optional[AnomalyEngine] = None) -> None:
    """Replace the embedded engine (closing the previous one)."""
    global ENGINE, FEED
    if ENGINE is not None:
        ENGINE.close()
    ENGINE = engine
    FEED = DashboardFeed(engine) if engine is not None else None


def _handle_ingest(body: Any) -> Response:
    engine, _ = _runtime()
    items = body if isinstance(body, list) else [body]

    results = []
    try:
        for item in items:
            results.append(engine.ingest(item))
    except DataValidationError as exc:
        return 400, {
            "detail": str(exc),
            "errors": [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in exc.errors],
            "accepted": len(results),
        }
    except EngineClosedError as exc:
        return 503, {"detail": str(exc)}

    anomalies = [r.anomaly.model_dump(mode="json") for r in results if r.anomaly is not None]
    return 200, {
        "accepted": len(results),
        "anomalies": anomalies,
        "metrics": results[-1].metrics.model_dump() if results else engine.metrics().model_dump(),
    }


def _handle_simulate(kind: str) -> Response:
    engine, _ = _runtime()
    try:
        simulation = SimulationKind(kind)
    except ValueError:
        return 404, {"detail": f"Unknown simulation: {kind}"}

    results = simulate_anomaly(engine, simulation)
    anomalies = [r.anomaly for r in results if r.anomaly is not None]
    return 200, {
        "simulation": simulation.value,
        "events": len(results),
        "anomaly_count": len(anomalies),
        "last_anomaly": anomalies[-1].model_dump(mode="json") if anomalies else None,
    }


def route(method: str, path: str, body: Any = None) -> Response:
    """
    Dispatch a request to its handler.

    Returns:
        (HTTP status, JSON-serializable payload)
    """
    path = path.split("?", 1)[0].rstrip("/") or "/"

    if method == "GET":
        if path == "/health":
            return 200, {"status": "ok"}

        _, feed = _runtime()
        if path == "/api/metrics":
            return 200, feed.summary()
        if path == "/api/events":
            events = [e.model_dump(mode="json") for e in feed.recent_events()]
            return 200, {"events": events, "total_count": len(events)}
        if path == "/api/anomalies":
            anomalies = [a.model_dump(mode="json") for a in feed.recent_anomalies()]
            return 200, {"anomalies": anomalies, "total_count": len(anomalies)}
        return 404, {"detail": "Not found"}

    if method == "POST":
        if path == "/api/events":
            if not isinstance(body, (dict, list)):
                return 400, {"detail": "Expected a JSON object or array"}
            return _handle_ingest(body)
        if path.startswith("/api/simulate/"):
            return _handle_simulate(path[len("/api/simulate/"):])
        return 404, {"detail": "Not found"}

    return 405, {"detail": "Method not allowed"}


class BackendHandler(BaseHTTPRequestHandler):
    server_version = "StreamSentinel/1.0"

    def _send_json(self, status: int, payload: Dict[str, Any]) -> None:
        body = json.dumps(payload).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Access-Control-Allow-Origin", "*")
        self.send_header("Access-Control-Allow-Headers", "Content-Type")
        self.send_header("Access-Control-Allow-Methods", "GET, POST, OPTIONS")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _read_json(self) -> Any:
        length = int(self.headers.get("Content-Length", "0"))
        if length <= 0:
            return None
        data = self.rfile.read(length)
        try:
            return json.loads(data.decode("utf-8"))
        except json.JSONDecodeError:
            return None

    def do_GET(self) -> None:
        self._send_json(*route("GET", self.path))

    def do_OPTIONS(self) -> None:
        self.send_response(204)
        self.send_header("Access-Control-Allow-Origin", "*")
        self.send_header("Access-Control-Allow-Headers", "Content-Type")
        self.send_header("Access-Control-Allow-Methods", "GET, POST, OPTIONS")
        self.end_headers()

    def do_POST(self) -> None:
        self._send_json(*route("POST", self.path, self._read_json()))


def run(host: str, port: int) -> None:
    setup_logging(logger_name="")
    logger.info("Starting backend server on %s:%s", host, port)
    _runtime()
    server = ThreadingHTTPServer((host, port), BackendHandler)
    try:
        server.serve_forever()
    finally:
        server.server_close()
        reset_runtime(None)


def main() -> None:
    parser = argparse.ArgumentParser(description="Stream Sentinel backend server")
    parser.add_argument("--host", default=os.getenv("SENTINEL_HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.getenv("SENTINEL_PORT", "8000")))
    args = parser.parse_args()

    run(args.host, args.port)


if __name__ == "__main__":
    main()
