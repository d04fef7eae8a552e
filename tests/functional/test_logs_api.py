"""
Functional tests for the request log: middleware persistence and the logs API.
"""

from datetime import datetime, timedelta

from esreport.logging.models import Log


def add_log(db_session, path="/api/health", status_code=200, minutes_ago=0, method="GET"):
    log = Log(
        timestamp=datetime.now() - timedelta(minutes=minutes_ago),
        method=method,
        path=path,
        status_code=status_code,
        username="tester",
        hostname="test-host",
    )
    db_session.add(log)
    db_session.commit()
    return log


class TestLoggingMiddleware:
    def test_api_calls_are_recorded(self, client, db_session):
        client.get("/api/health")

        logs = db_session.query(Log).all()
        assert len(logs) == 1
        assert logs[0].path == "/api/health"
        assert logs[0].method == "GET"
        assert logs[0].status_code == 200
        assert logs[0].response_body == '{"status":"ok"}'
        assert logs[0].processing_time is not None

    def test_request_body_and_errors_are_recorded(self, client, db_session):
        payload = {"index_tag": "app", "table_headers": [], "table_values": []}
        client.post("/api/search/process-logs", json=payload)

        log = db_session.query(Log).one()
        assert log.status_code == 400
        assert '"index_tag"' in log.request_body
        assert "InvalidSpecError" in log.response_body

    def test_log_endpoints_are_not_recorded(self, client, db_session):
        client.get("/api/logs/")
        assert db_session.query(Log).count() == 0


class TestLogsApi:
    def test_list_logs_newest_first(self, client, db_session):
        add_log(db_session, path="/api/old", minutes_ago=10)
        add_log(db_session, path="/api/new", minutes_ago=1)

        response = client.get("/api/logs/")

        assert response.status_code == 200
        assert [entry["path"] for entry in response.json()] == ["/api/new", "/api/old"]
        assert response.headers["X-Total-Count"] == "2"

    def test_time_window(self, client, db_session):
        add_log(db_session, path="/api/recent", minutes_ago=5)
        add_log(db_session, path="/api/stale", minutes_ago=60 * 48)

        response = client.get("/api/logs/", params={"hours": 24})

        assert [entry["path"] for entry in response.json()] == ["/api/recent"]

    def test_status_and_search_filters(self, client, db_session):
        add_log(db_session, path="/api/search/process-logs", status_code=502, method="POST")
        add_log(db_session, path="/api/health", status_code=200)

        response = client.get("/api/logs/", params={"status_min": 500, "search": "process"})

        assert [entry["status_code"] for entry in response.json()] == [502]

    def test_pagination(self, client, db_session):
        for i in range(5):
            add_log(db_session, path=f"/api/{i}", minutes_ago=i)

        response = client.get("/api/logs/", params={"limit": 2, "offset": 2})

        assert [entry["path"] for entry in response.json()] == ["/api/2", "/api/3"]
        assert response.headers["X-Total-Count"] == "5"

    def test_invalid_status_range(self, client):
        response = client.get("/api/logs/", params={"status_min": 500, "status_max": 400})
        assert response.status_code == 400

    def test_error_logs(self, client, db_session):
        add_log(db_session, status_code=200)
        add_log(db_session, status_code=404)
        add_log(db_session, status_code=503)

        response = client.get("/api/logs/errors")

        assert response.status_code == 200
        assert sorted(entry["status_code"] for entry in response.json()) == [404, 503]
