"""
HTTP API for the visualizer front end.

``POST /api/schedule`` takes the algorithm from ``scheduling_type``; the
other ``/api/*`` routes imply it. Successful runs return 200 with
``{"status": "success", ...result}``. Input errors return 400 and anything
else 500, both as ``{"status": "error", "message": ...}``.
"""

from __future__ import annotations

import logging
from typing import Optional

from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from .config import ServerConfig
from .engine import schedule
from .errors import MalformedInput, SchedulerError, UnsupportedAlgorithm
from .workload_io import parse_schedule_request

logger = logging.getLogger(__name__)

# Route path -> implied algorithm (None: read scheduling_type from the body).
SCHEDULE_ROUTES = {
    "/api/schedule": None,
    "/api/mlq": "MLQ",
    "/api/mlq-aging": "MLQ-Aging",
    "/api/mlfq": "MLFQ",
    "/api/sjf-aging": "SJF-Aging",
}


def _error(message: str, status: int):
    return jsonify({"status": "error", "message": message}), status


def run_schedule_request(implied_algorithm: Optional[str] = None):
    body = request.get_json(silent=True)
    if body is None:
        raise MalformedInput("Invalid JSON data")

    req = parse_schedule_request(body, algorithm=implied_algorithm)
    if not req.algorithm:
        raise UnsupportedAlgorithm("Missing scheduling_type")

    result = schedule(req.processes, req.algorithm, req.params)
    logger.info(
        "%s %s: %d processes, %d segments",
        request.method,
        request.path,
        len(req.processes),
        len(result.timeline),
    )
    payload = result.to_dict()
    payload["status"] = "success"
    return jsonify(payload), 200


def _make_view(implied_algorithm: Optional[str]):
    def view():
        return run_schedule_request(implied_algorithm)

    return view


def create_app(config: Optional[ServerConfig] = None) -> Flask:
    config = config or ServerConfig.from_env()

    app = Flask(__name__)
    app.config["SCHEDULER_VIZ"] = config
    CORS(app, origins=config.cors_origins, methods=["GET", "POST", "OPTIONS"])

    @app.route("/")
    def root():
        return jsonify({"status": "success", "message": "CPU Scheduling Algorithm Visualiser API"})

    @app.route("/test")
    def health():
        return jsonify({"status": "success", "message": "Test endpoint working"})

    for path, algorithm in SCHEDULE_ROUTES.items():
        endpoint = "schedule_" + path.rsplit("/", 1)[-1].replace("-", "_")
        app.add_url_rule(path, endpoint=endpoint, view_func=_make_view(algorithm), methods=["POST"])

    @app.errorhandler(SchedulerError)
    def handle_bad_input(exc: SchedulerError):
        logger.info("rejected %s %s: %s", request.method, request.path, exc)
        return _error(str(exc), 400)

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        # Let Flask render its own HTTP errors (404, 405, ...).
        if isinstance(exc, HTTPException):
            return exc
        logger.exception("unexpected failure on %s %s", request.method, request.path)
        return _error("Server error: unexpected failure while scheduling", 500)

    return app
