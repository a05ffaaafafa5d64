"""
Tests for diagnostics and the periodic health probe
"""

import logging
from unittest.mock import Mock

import app as app_module
import config
import db
import diag
from schemas import DiagReport


class TestEnvReport:

    def test_nothing_set(self):
        assert diag.env_report({}) == {"hasStorageCS": False, "hasSqlVars": False, "hasSqlCS": False}

    def test_sql_vars_need_all_four(self):
        env = {"SqlServer": "h", "SqlDatabase": "d", "SqlUser": "u"}
        assert diag.env_report(env)["hasSqlVars"] is False
        env["SqlPassword"] = "p"
        assert diag.env_report(env)["hasSqlVars"] is True

    def test_connection_strings(self):
        env = {"ReprintStorageConnectionString": "x", "SqlConnectionString": "y"}
        report = diag.env_report(env)
        assert report["hasStorageCS"] is True
        assert report["hasSqlCS"] is True


class TestChecks:

    def test_sql_ok(self, sqlite_engine, monkeypatch):
        monkeypatch.setattr(db, "engine", sqlite_engine)
        assert diag.check_sql() == {"ok": True}

    def test_sql_not_configured(self, monkeypatch):
        monkeypatch.setattr(db, "engine", None)
        assert diag.check_sql() == {"ok": False, "error": "SQL config not found"}

    def test_storage_not_configured(self, monkeypatch):
        monkeypatch.setattr(config, "STORAGE_CONNECTION_STRING", None)
        assert diag.check_storage() == {"ok": False, "error": "ReprintStorageConnectionString missing"}

    def test_storage_ok(self, monkeypatch):
        store_cls = Mock()
        store_cls.from_env.return_value.check.return_value = "0x8DCAFE"
        monkeypatch.setattr(diag, "ReprintBlobStore", store_cls)
        assert diag.check_storage() == {"ok": True, "containerPropsETag": "0x8DCAFE"}


class TestDiagEndpoint:

    def test_all_ok(self, client, monkeypatch):
        monkeypatch.setattr(diag, "check_storage", lambda: {"ok": True, "containerPropsETag": "e"})
        monkeypatch.setattr(diag, "check_sql", lambda: {"ok": True})
        res = client.get("/api/diag")
        assert res.status_code == 200
        body = res.json()
        assert body["ok"] is True
        assert set(body["env"]) == {"hasStorageCS", "hasSqlVars", "hasSqlCS"}
        assert body["checks"]["sql"] == {"ok": True}
        assert "3MB" in body["note"]

    def test_failed_check_flips_ok(self, client, monkeypatch):
        monkeypatch.setattr(diag, "check_storage", lambda: {"ok": True, "containerPropsETag": "e"})
        monkeypatch.setattr(diag, "check_sql", lambda: {"ok": False, "error": "login failed"})
        body = client.get("/api/diag").json()
        assert body["ok"] is False
        assert body["checks"]["sql"]["error"] == "login failed"

    def test_unexpected_failure_returns_partial_report(self, client, monkeypatch):
        def boom():
            raise RuntimeError("boom")

        monkeypatch.setattr(diag, "check_storage", lambda: {"ok": True, "containerPropsETag": "e"})
        monkeypatch.setattr(diag, "check_sql", boom)
        res = client.get("/api/diag")
        assert res.status_code == 500
        body = res.json()
        assert body["ok"] is False
        assert body["error"] == "boom"
        assert body["out"]["checks"]["storage"]["ok"] is True

    def test_echo(self, client):
        res = client.post("/api/diag", content=b"hello=world", headers={"content-type": "text/plain"})
        assert res.json() == {
            "message": "This is a diagnostic report from the backend.",
            "receivedContentType": "text/plain",
            "rawBodyLengthInBytes": 11,
            "first100CharsOfRawBody": "hello=world",
        }

    def test_echo_truncates_body(self, client):
        body = client.post("/api/diag", content=b"x" * 250, headers={"content-type": "text/plain"}).json()
        assert body["rawBodyLengthInBytes"] == 250
        assert len(body["first100CharsOfRawBody"]) == 100

    def test_echo_empty_body(self, client):
        body = client.post("/api/diag").json()
        assert body["rawBodyLengthInBytes"] == 0
        assert body["first100CharsOfRawBody"] == "N/A"


class TestHealthProbe:

    def test_logs_degraded(self, monkeypatch, caplog):
        monkeypatch.setattr(diag, "run_diagnostics", lambda: DiagReport(ok=False, checks={"sql": {"ok": False}}))
        with caplog.at_level(logging.WARNING, logger="reprint-intake"):
            app_module.run_health_probe()
        assert "degraded" in caplog.text

    def test_logs_healthy(self, monkeypatch, caplog):
        monkeypatch.setattr(diag, "run_diagnostics", lambda: DiagReport(ok=True))
        with caplog.at_level(logging.INFO, logger="reprint-intake"):
            app_module.run_health_probe()
        assert "reachable" in caplog.text


def test_health(client):
    assert client.get("/health").json() == {"ok": True}


def test_index_served(client):
    res = client.get("/")
    assert res.status_code == 200
    assert "reprintForm" in res.text
