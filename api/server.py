"""
Herb Passport REST API Server

Flask REST API for:
- Registering herb lots
- Growth stage and lab report updates
- Record lookup, region / name search
- Per-record change history
- Ledger integrity check

Run:
    flask --app api.server run --port 8080

Or with gunicorn (production):
    gunicorn -w 1 -b 0.0.0.0:8080 api.server:app

A single worker keeps one writer per ledger file.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable

from flask import Flask, jsonify, request
from flask_cors import CORS

from herb_ledger import __version__
from herb_ledger.contract import HerbContract, to_json_ready
from herb_ledger.errors import (
    AlreadyExists,
    DecodeError,
    HerbLedgerError,
    InvalidInvocation,
    InvalidRecord,
    NotFound,
    StoreUnavailable,
)
from herb_ledger.metrics import Metrics
from herb_ledger.settings import Settings, configure_logging
from herb_ledger.store import JsonlLedgerStore, LedgerStore

app = Flask(__name__)
CORS(app)

# Fields accepted by POST /api/herbs, in AddHerb argument order
CREATE_FIELDS = [
    "herbID", "name", "scientificName", "farmer", "quantity",
    "latitude", "longitude", "region", "placeName",
    "growthStage", "plantingDate",
]

STATUS_CODES = {
    AlreadyExists: 409,
    NotFound: 404,
    InvalidRecord: 400,
    InvalidInvocation: 400,
    DecodeError: 500,
    StoreUnavailable: 503,
}

metrics = Metrics()


def get_settings() -> Settings:
    if "HERB_SETTINGS" not in app.config:
        app.config["HERB_SETTINGS"] = Settings.load()
    return app.config["HERB_SETTINGS"]


def get_store() -> LedgerStore:
    """Ledger binding for this app; JSONL file unless one was injected."""
    if app.config.get("LEDGER_STORE") is None:
        app.config["LEDGER_STORE"] = JsonlLedgerStore(get_settings().ledger_path)
    return app.config["LEDGER_STORE"]


def get_contract() -> HerbContract:
    if app.config.get("HERB_CONTRACT") is None:
        app.config["HERB_CONTRACT"] = HerbContract(validator=get_settings().validator())
    return app.config["HERB_CONTRACT"]


def call(op: str, fn: Callable[[], Any]) -> Any:
    try:
        result = fn()
    except HerbLedgerError as e:
        metrics.record(op, e)
        raise
    metrics.record(op)
    return result


@app.errorhandler(HerbLedgerError)
def handle_ledger_error(e: HerbLedgerError):
    status = next((code for cls, code in STATUS_CODES.items() if isinstance(e, cls)), 500)
    return jsonify({"error": str(e), "kind": type(e).__name__}), status


def _body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidInvocation("Request body must be a JSON object")
    return data


def _str_field(data: dict, name: str, required: bool = False) -> str:
    value = data.get(name, "")
    if not isinstance(value, str):
        raise InvalidRecord(name, "must be a string")
    if required and not value:
        raise InvalidRecord(name, "is required")
    return value


@app.route("/api/health")
def health_check():
    """Health check endpoint."""
    return jsonify({
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
    })


@app.route("/api/herbs", methods=["POST"])
def add_herb():
    """
    Register a new herb lot.

    Request body (all strings, herbID required):
    {
        "herbID": "H1", "name": "Tulsi", "scientificName": "Ocimum tenuiflorum",
        "farmer": "...", "quantity": "...", "latitude": "...", "longitude": "...",
        "region": "Kerala", "placeName": "...", "growthStage": "...", "plantingDate": "..."
    }
    """
    data = _body()
    args = [_str_field(data, f, required=(f == "herbID")) for f in CREATE_FIELDS]
    store = get_store()
    call("AddHerb", lambda: get_contract().add_herb(store, *args))
    herb = get_contract().get_herb(store, args[0])
    return jsonify(herb.to_record()), 201


@app.route("/api/herbs")
def list_herbs():
    """
    List herbs.

    Query params (at most one):
        - region: exact region match, case-insensitive
        - name: substring of name or scientific name, case-insensitive
    """
    region = request.args.get("region")
    name = request.args.get("name")
    if region is not None and name is not None:
        raise InvalidInvocation("Use either 'region' or 'name', not both")

    store = get_store()
    contract = get_contract()
    if region is not None:
        herbs = call("QueryHerbsByRegion", lambda: contract.query_herbs_by_region(store, region))
    elif name is not None:
        herbs = call("QueryHerbsByName", lambda: contract.query_herbs_by_name(store, name))
    else:
        herbs = call("GetAllHerbs", lambda: contract.get_all_herbs(store))

    return jsonify({"herbs": to_json_ready(herbs), "total": len(herbs)})


@app.route("/api/herbs/<herb_id>")
def get_herb(herb_id: str):
    herb = call("GetHerb", lambda: get_contract().get_herb(get_store(), herb_id))
    return jsonify(herb.to_record())


@app.route("/api/herbs/<herb_id>/exists")
def herb_exists(herb_id: str):
    exists = call("HerbExists", lambda: get_contract().herb_exists(get_store(), herb_id))
    return jsonify({"herbID": herb_id, "exists": exists})


@app.route("/api/herbs/<herb_id>/growth-stage", methods=["PUT"])
def update_growth_stage(herb_id: str):
    """Request body: {"growthStage": "..."}"""
    stage = _str_field(_body(), "growthStage")
    store = get_store()
    call("UpdateGrowthStage", lambda: get_contract().update_growth_stage(store, herb_id, stage))
    return jsonify(get_contract().get_herb(store, herb_id).to_record())


@app.route("/api/herbs/<herb_id>/lab-report", methods=["PUT"])
def update_lab_report(herb_id: str):
    """Request body: {"labReportHash": "...", "status": "..."}"""
    data = _body()
    lab_hash = _str_field(data, "labReportHash")
    status = _str_field(data, "status")
    store = get_store()
    call("UpdateLabReport", lambda: get_contract().update_lab_report(store, herb_id, lab_hash, status))
    return jsonify(get_contract().get_herb(store, herb_id).to_record())


@app.route("/api/herbs/<herb_id>/history")
def get_history(herb_id: str):
    """Full change timeline, oldest first."""
    entries = call("GetHistory", lambda: get_contract().get_history(get_store(), herb_id))
    return jsonify({"herbID": herb_id, "history": to_json_ready(entries), "total": len(entries)})


@app.route("/api/ledger/verify")
def verify_ledger():
    """Verify ledger hash chain integrity."""
    store = get_store()
    is_valid = store.verify()
    return jsonify({
        "valid": is_valid,
        "tip_hash": store.tip_hash() if is_valid else None,
        "total_blocks": store.block_count(),
    })


@app.route("/api/metrics")
def get_metrics():
    return jsonify(metrics.snapshot())


if __name__ == "__main__":
    # Development server
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    app.run(host=settings.HOST, port=settings.PORT, debug=True)
