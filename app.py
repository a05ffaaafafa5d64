# app.py - FastAPI server for the card re-print intake form
import os
import logging
from typing import Optional, Tuple
from fastapi import FastAPI, HTTPException, Depends, File, Form, Request, UploadFile
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import ValidationError
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from apscheduler.schedulers.background import BackgroundScheduler
import config
import db
import diag
import locations
import schemas
from processor import submit_request
from storage import ReprintBlobStore, StorageNotConfigured
from watermark import InvalidImageError

app = FastAPI(title="Parking Card Re-print Intake")
app.mount("/static", StaticFiles(directory=config.STATIC_DIR), name="static")

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger("reprint-intake")

# Periodic health probe (same checks as /api/diag)
scheduler = BackgroundScheduler()


def run_health_probe():
    try:
        report = diag.run_diagnostics()
        if report.ok:
            logger.info("[HEALTH] storage and SQL reachable")
        else:
            logger.warning("[HEALTH] degraded: %s", report.checks)
    except Exception as e:
        logger.error(f"[HEALTH] probe error: {e}", exc_info=True)


@app.on_event("startup")
def startup_event():
    try:
        db.init_db()
        logger.info("[STARTUP] Requests table ready")
    except Exception as e:
        logger.warning("[STARTUP] database not initialised: %s", e)

    if config.HEALTH_PROBE_MINUTES > 0:
        scheduler.add_job(run_health_probe, 'interval', minutes=config.HEALTH_PROBE_MINUTES, id='health_probe_job', replace_existing=True)
        scheduler.start()
        logger.info("[STARTUP] health probe scheduled every %d minute(s)", config.HEALTH_PROBE_MINUTES)


@app.on_event("shutdown")
def shutdown_event():
    if scheduler.running:
        scheduler.remove_all_jobs()
        scheduler.shutdown()
    logger.info("[SHUTDOWN] health probe scheduler stopped")


# Dependencies
def get_db():
    if db.engine is None:
        raise HTTPException(status_code=503, detail="Database is not configured")
    db_sess = db.SessionLocal()
    try:
        yield db_sess
    finally:
        db_sess.close()


def get_blob_store():
    try:
        return ReprintBlobStore.from_env()
    except StorageNotConfigured as e:
        raise HTTPException(status_code=503, detail=str(e))


def parse_submission(
    id_card_image: Optional[UploadFile] = File(None),
    full_name: Optional[str] = Form(None),
    age: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    province: Optional[str] = Form(None),
    district: Optional[str] = Form(None),
    subdistrict: Optional[str] = Form(None),
    vehicle_type: Optional[str] = Form(None),
    vehicle_brand: Optional[str] = Form(None),
    license_plate: Optional[str] = Form(None),
    consent: Optional[str] = Form(None),
) -> Tuple[schemas.ReprintForm, bytes]:
    """Validate the multipart body; runs before the store and session are resolved."""
    if id_card_image is None:
        raise HTTPException(status_code=400, detail="No image uploaded")
    image_bytes = id_card_image.file.read()
    if not image_bytes:
        raise HTTPException(status_code=400, detail="No image uploaded")
    if len(image_bytes) > config.MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail=f"Image exceeds {config.MAX_UPLOAD_BYTES} bytes")

    fields = {
        "full_name": full_name, "age": age, "phone": phone, "address": address,
        "province": province, "district": district, "subdistrict": subdistrict,
        "vehicle_type": vehicle_type, "vehicle_brand": vehicle_brand,
        "license_plate": license_plate, "consent": consent or False,
    }
    try:
        form = schemas.ReprintForm(**{k: v for k, v in fields.items() if v is not None})
    except ValidationError as e:
        errors = [{"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]} for err in e.errors()]
        raise HTTPException(status_code=400, detail=errors)

    logger.info("/api/requests called; file=%s; bytes=%d", id_card_image.filename, len(image_bytes))
    return form, image_bytes


@app.get("/", include_in_schema=False)
def index():
    return FileResponse(os.path.join(config.STATIC_DIR, "index.html"))


# Plain def so the blocking watermark, upload and commit run in the threadpool
@app.post("/api/requests", status_code=201, response_model=schemas.SubmissionOut)
def create_request(
    submission: Tuple[schemas.ReprintForm, bytes] = Depends(parse_submission),
    store: ReprintBlobStore = Depends(get_blob_store),
    db_sess: Session = Depends(get_db),
):
    form, image_bytes = submission
    try:
        row = submit_request(form, image_bytes, store, db_sess)
    except InvalidImageError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except IntegrityError:
        logger.exception("IntegrityError inserting request")
        raise HTTPException(status_code=500, detail="Error processing request: duplicate request id")
    except Exception as e:
        logger.exception("Error processing request")
        raise HTTPException(status_code=500, detail=f"Error processing request: {e}")

    return schemas.SubmissionOut(
        status="success",
        request_id=row.request_id,
        message="ส่งข้อมูลสำเร็จ",
    )


@app.get("/api/locations")
def get_locations(province: Optional[str] = None, district: Optional[str] = None):
    return locations.lookup(province=province, district=district)


@app.get("/api/diag")
def get_diag():
    report = schemas.DiagReport()
    try:
        diag.run_diagnostics(report)
    except Exception as e:
        logger.exception("Diagnostics failed")
        return JSONResponse(status_code=500, content={"ok": False, "error": str(e), "out": report.model_dump()})
    return report


@app.post("/api/diag")
async def post_diag(request: Request):
    logger.info("--- DIAGNOSTIC RUN ---")
    body = await request.body()
    return diag.echo_report(request.headers.get("content-type"), body)


@app.get("/health")
def health():
    return {"ok": True}
