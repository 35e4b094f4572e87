import os
import json
from datetime import datetime, timezone
from typing import Any, Dict

from dotenv import load_dotenv
from flask import Flask, jsonify, request

from database import get_db_connection, init_db
from data_paths import DATA_ROOT, ensure_data_root
from services.analytics import get_analytics_engine
from services.models import DateRange
from services.snapshot import CafeSnapshot

# Load environment variables from .env file
load_dotenv()

# --- App Initialization ---
app = Flask(__name__)
app.json.sort_keys = False

_db_bootstrapped = False

DATA_DIR = DATA_ROOT
SETTINGS_FILE = DATA_DIR / 'settings.json'


@app.before_request
def _bootstrap_database():
    global _db_bootstrapped
    if _db_bootstrapped:
        return
    try:
        ensure_data_root()
        init_db()
        _db_bootstrapped = True
    except Exception as exc:  # pragma: no cover - defensive logging
        app.logger.exception("Failed to initialize database before request: %s", exc)


def read_json_file(file_path):
    if not os.path.exists(file_path) or os.path.getsize(file_path) == 0:
        return {}
    with open(file_path, 'r') as f:
        try:
            return json.load(f)
        except json.JSONDecodeError:
            app.logger.error(f"JSONDecodeError for {file_path}")
            return {}


def _load_settings_dict() -> Dict[str, Any]:
    settings_blob = read_json_file(SETTINGS_FILE)
    return settings_blob if isinstance(settings_blob, dict) else {}


def _requested_range():
    start = request.args.get('start') or request.args.get('startDate')
    end = request.args.get('end') or request.args.get('endDate')
    if not start and not end:
        return None
    if not start or not end:
        raise ValueError('Both start and end dates are required for a date range.')
    return DateRange.parse(start, end)


@app.route('/api/analytics', methods=['GET'])
def api_analytics():
    try:
        explicit_range = _requested_range()
    except ValueError as exc:
        return jsonify({'message': str(exc)}), 400

    engine = get_analytics_engine()
    conn = get_db_connection()
    try:
        snapshot = CafeSnapshot.build(conn)
        settings = _load_settings_dict()
        report = engine.run(
            snapshot,
            datetime.now(timezone.utc),
            explicit_range,
            timezone_name=settings.get('timezone'),
        )
        return jsonify({'analytics': report.to_dict()})
    except Exception as exc:
        app.logger.exception("Failed to compute analytics: %s", exc)
        return jsonify({'message': 'Failed to load analytics.'}), 500
    finally:
        conn.close()


@app.route('/api/health', methods=['GET'])
def api_health():
    return jsonify({'status': 'ok'})


def main():
    port = int(os.getenv('CAFE_PORT', '5002'))
    app.run(host='0.0.0.0', port=port, debug=False)


if __name__ == '__main__':
    init_db()
    main()
