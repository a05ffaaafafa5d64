import io
import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app as app_module
from config import LOCAL_TZ
from models import Base


class FakeBlobStore:
    """Stands in for ReprintBlobStore; keeps uploads in memory."""

    def __init__(self, fail_with=None):
        self.name = "re-print-ids"
        self.uploads = {}
        self.fail_with = fail_with

    def upload_image(self, request_id, data, now=None):
        if self.fail_with:
            raise self.fail_with
        local = now.astimezone(LOCAL_TZ)
        blob_name = f"{local:%Y}/{local:%m}/{request_id}.jpg"
        self.uploads[blob_name] = data
        return f"{self.name}/{blob_name}"

    def check(self):
        return "0x8DCAFE"


@pytest.fixture
def sqlite_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(sqlite_engine):
    Session = sessionmaker(bind=sqlite_engine, autocommit=False, autoflush=False, future=True)
    sess = Session()
    yield sess
    sess.close()


@pytest.fixture
def blob_store():
    return FakeBlobStore()


@pytest.fixture
def client(db_session, blob_store):
    def override_db():
        yield db_session

    app_module.app.dependency_overrides[app_module.get_db] = override_db
    app_module.app.dependency_overrides[app_module.get_blob_store] = lambda: blob_store
    yield TestClient(app_module.app)
    app_module.app.dependency_overrides.clear()


def make_jpeg(size=(600, 400), color=(255, 255, 255), exif=None):
    buf = io.BytesIO()
    img = Image.new("RGB", size, color)
    if exif is not None:
        img.save(buf, format="JPEG", exif=exif)
    else:
        img.save(buf, format="JPEG")
    return buf.getvalue()


@pytest.fixture
def sample_jpeg():
    return make_jpeg()


@pytest.fixture
def form_data():
    return {
        "full_name": "สมชาย ใจดี",
        "age": "35",
        "phone": "081-234-5678",
        "address": "99/1 ถนนสุขุมวิท",
        "province": "สมุทรปราการ",
        "district": "เมืองสมุทรปราการ",
        "subdistrict": "สำโรงเหนือ",
        "vehicle_type": "รถยนต์",
        "vehicle_brand": "Toyota",
        "license_plate": "1กข 1234",
        "consent": "true",
    }


@pytest.fixture
def jpeg_factory():
    return make_jpeg


@pytest.fixture
def failing_store():
    return FakeBlobStore(fail_with=RuntimeError("blob service unavailable"))
