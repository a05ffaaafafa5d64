# processor.py - turns one validated submission into a stored image and a Requests row
import logging
import datetime
from sqlalchemy.orm import Session
from models import Requests
from request_ids import generate_request_id
from schemas import ReprintForm
from storage import ReprintBlobStore
from watermark import apply_watermark

logger = logging.getLogger("reprint-processor")


def submit_request(form: ReprintForm, image_bytes: bytes, store: ReprintBlobStore, sess: Session, now=None) -> Requests:
    """Watermark, upload, insert. Raises on the first failing step."""
    now = now or datetime.datetime.now(datetime.timezone.utc)
    request_id = generate_request_id(now)
    logger.info("Processing request %s (%d bytes image)", request_id, len(image_bytes))

    watermarked = apply_watermark(image_bytes, now=now)
    blob_path = store.upload_image(request_id, watermarked, now=now)

    row = Requests(
        request_id=request_id,
        timestamp=now,
        image_blob_path=blob_path,
        **form.model_dump(),
    )
    try:
        sess.add(row)
        sess.commit()
    except Exception:
        sess.rollback()
        logger.exception("Insert failed for request %s (blob %s already uploaded)", request_id, blob_path)
        raise

    logger.info("Stored request %s -> %s", request_id, blob_path)
    return row
