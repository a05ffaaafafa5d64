# diag.py - health report: env vars, blob storage, SQL connectivity
import os
import logging
from sqlalchemy import text
import db
from schemas import DiagReport
from storage import ReprintBlobStore

logger = logging.getLogger("reprint-diag")

SIZE_NOTE = (
    "ถ้าภาพใหญ่เกิน ~3MB (Base64 ~4MB+) อาจติดลิมิตของ Static Web Apps "
    "ให้ลดขนาดภาพฝั่ง client"
)


def env_report(env=None) -> dict:
    env = os.environ if env is None else env
    return {
        "hasStorageCS": bool(env.get("ReprintStorageConnectionString")),
        "hasSqlVars": bool(
            env.get("SqlServer") and env.get("SqlDatabase") and env.get("SqlUser") and env.get("SqlPassword")
        ),
        "hasSqlCS": bool(env.get("SqlConnectionString")),
    }


def check_storage() -> dict:
    try:
        etag = ReprintBlobStore.from_env().check()
        return {"ok": True, "containerPropsETag": etag}
    except Exception as e:
        logger.warning("Storage check failed: %s", e)
        return {"ok": False, "error": str(e)}


def check_sql() -> dict:
    try:
        if db.engine is None:
            raise db.DatabaseNotConfigured("SQL config not found")
        with db.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return {"ok": True}
    except Exception as e:
        logger.warning("SQL check failed: %s", e)
        return {"ok": False, "error": str(e)}


def run_diagnostics(report=None) -> DiagReport:
    """Fill `report` in place so a caller still has the partial result if a step blows up."""
    report = report if report is not None else DiagReport()
    report.env = env_report()
    report.checks["storage"] = check_storage()
    report.checks["sql"] = check_sql()
    report.ok = all(c["ok"] for c in report.checks.values())
    report.note = SIZE_NOTE
    return report


def echo_report(content_type, raw_body: bytes) -> dict:
    """What the server actually received; handy when a proxy mangles multipart bodies."""
    return {
        "message": "This is a diagnostic report from the backend.",
        "receivedContentType": content_type or "Content-Type Not Found",
        "rawBodyLengthInBytes": len(raw_body),
        "first100CharsOfRawBody": raw_body.decode("utf-8", errors="replace")[:100] if raw_body else "N/A",
    }
