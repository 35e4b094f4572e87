import json
import pathlib
import sys
from datetime import datetime, timedelta, timezone

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import app as cafe_app
import database
from services.analytics import AnalyticsEngine
from services.estimators import FixedEstimator


@pytest.fixture
def analytics_environment(tmp_path, monkeypatch):
    data_dir = tmp_path / 'data'
    data_dir.mkdir()

    settings_file = data_dir / 'settings.json'
    settings_file.write_text(json.dumps({'timezone': 'UTC'}))

    monkeypatch.setattr(database, 'DATA_DIR', data_dir)
    monkeypatch.setattr(database, 'DATABASE_FILE', data_dir / 'cafe.db')
    monkeypatch.setattr(database, 'ensure_data_root', lambda: data_dir)

    monkeypatch.setattr(cafe_app, 'DATA_DIR', data_dir)
    monkeypatch.setattr(cafe_app, 'SETTINGS_FILE', settings_file)
    monkeypatch.setattr(cafe_app, 'ensure_data_root', lambda: data_dir)
    monkeypatch.setattr(cafe_app, '_db_bootstrapped', False)
    monkeypatch.setattr(
        cafe_app, 'get_analytics_engine', lambda: AnalyticsEngine(estimator=FixedEstimator())
    )
    cafe_app.app.config['TESTING'] = True

    database.init_db()

    yield cafe_app


def _seed_order(created_at, total, item_name='Masala Chai', status='completed'):
    conn = database.get_db_connection()
    try:
        order_id = f"ord-{created_at.timestamp()}"
        conn.execute(
            "INSERT INTO orders (id, table_number, status, payment_method, total_amount, created_at) VALUES (?, ?, ?, ?, ?, ?)",
            (order_id, 3, status, 'online', total, created_at.isoformat()),
        )
        conn.execute(
            "INSERT INTO order_items (id, order_id, item_name, quantity, price) VALUES (?, ?, ?, ?, ?)",
            (f"{order_id}-1", order_id, item_name, 1, total),
        )
        conn.commit()
    finally:
        conn.close()


def test_analytics_endpoint_returns_report(analytics_environment):
    _seed_order(datetime.now(timezone.utc) - timedelta(minutes=5), 60)
    client = analytics_environment.app.test_client()

    response = client.get('/api/analytics')
    assert response.status_code == 200
    report = response.get_json()['analytics']
    assert report['revenue']['total'] == 60
    assert report['revenue']['last24Hours'] == 60
    assert report['revenue']['byPaymentMethod'] == {'cash': 0, 'online': 60}
    assert report['timezone'] == 'UTC'
    assert report['items']['popular'][0]['name'] == 'Masala Chai'


def test_analytics_endpoint_accepts_date_range(analytics_environment):
    client = analytics_environment.app.test_client()
    response = client.get('/api/analytics?start=2024-03-01&end=2024-03-03')
    assert response.status_code == 200
    by_day = response.get_json()['analytics']['revenue']['byDay']
    assert [entry['date'] for entry in by_day] == ['Mar 01', 'Mar 02', 'Mar 03']


def test_analytics_endpoint_rejects_bad_dates(analytics_environment):
    client = analytics_environment.app.test_client()
    assert client.get('/api/analytics?start=yesterday-ish&end=2024-03-03').status_code == 400
    assert client.get('/api/analytics?start=2024-03-01').status_code == 400


def test_analytics_endpoint_rejects_reversed_range(analytics_environment):
    client = analytics_environment.app.test_client()
    response = client.get('/api/analytics?start=2024-03-05&end=2024-03-01')
    assert response.status_code == 400
    assert 'ends before it starts' in response.get_json()['message']


def test_analytics_endpoint_caps_range_length(analytics_environment):
    client = analytics_environment.app.test_client()
    assert client.get('/api/analytics?start=0001-01-01&end=9999-12-31').status_code == 400
    # 2024 is a leap year: Jan 1 to Dec 31 is exactly 366 days.
    response = client.get('/api/analytics?start=2024-01-01&end=2024-12-31')
    assert response.status_code == 200
    assert len(response.get_json()['analytics']['revenue']['byDay']) == 366
    assert client.get('/api/analytics?start=2024-01-01&end=2025-01-01').status_code == 400


def test_analytics_endpoint_reports_failures_without_partial_data(analytics_environment, monkeypatch):
    class BrokenEngine:
        def run(self, *args, **kwargs):
            raise RuntimeError('boom')

    monkeypatch.setattr(analytics_environment, 'get_analytics_engine', lambda: BrokenEngine())
    client = analytics_environment.app.test_client()
    response = client.get('/api/analytics')
    assert response.status_code == 500
    assert response.get_json() == {'message': 'Failed to load analytics.'}


def test_settings_timezone_overrides_engine_default(analytics_environment):
    analytics_environment.SETTINGS_FILE.write_text(json.dumps({'timezone': 'Asia/Kolkata'}))
    client = analytics_environment.app.test_client()
    response = client.get('/api/analytics')
    assert response.status_code == 200
    assert response.get_json()['analytics']['timezone'] == 'Asia/Kolkata'


def test_numeric_settings_timezone_falls_back_to_utc(analytics_environment):
    analytics_environment.SETTINGS_FILE.write_text(json.dumps({'timezone': 5}))
    client = analytics_environment.app.test_client()
    response = client.get('/api/analytics')
    assert response.status_code == 200
    assert response.get_json()['analytics']['timezone'] == 'UTC'
