import bcrypt
import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.core.errors import UpstreamAssetError
from app.core.security import CredentialVerifier
from app.db.session import Database
from app.main import create_app
from app.services.asset_store import StoredAsset

ADMIN_USERNAME = "librarian"
ADMIN_PASSWORD = "correct horse battery staple"
JWT_SECRET = "test-signing-secret"


class FakeAssetStore:
    """In-memory stand-in for the cloud asset store."""

    def __init__(self):
        self.uploaded = []
        self.destroyed = []
        self.fail_upload = False
        self.fail_destroy = False

    def upload(self, filename, content):
        if self.fail_upload:
            raise UpstreamAssetError("upload failed")
        public_id = f"library_pdfs/{filename.rsplit('.', 1)[0]}"
        self.uploaded.append(public_id)
        return StoredAsset(url=f"https://assets.example.com/raw/{public_id}.pdf", public_id=public_id)

    def destroy(self, public_id):
        if self.fail_destroy:
            raise UpstreamAssetError("destroy failed")
        self.destroyed.append(public_id)


@pytest.fixture
def settings():
    password_hash = bcrypt.hashpw(ADMIN_PASSWORD.encode("utf-8"), bcrypt.gensalt(rounds=4)).decode("utf-8")
    return Settings(
        _env_file=None,
        environment="test",
        database_url="sqlite://",
        auto_create_schema=False,
        admin_username=ADMIN_USERNAME,
        admin_password_hash=password_hash,
        jwt_secret=JWT_SECRET,
        cloudinary_cloud_name=None,
        cloudinary_api_key=None,
        cloudinary_api_secret=None,
    )


@pytest.fixture
def database(settings):
    database = Database(settings.database_url)
    database.create_all()
    yield database
    database.dispose()


@pytest.fixture
def db(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture
def asset_store():
    return FakeAssetStore()


@pytest.fixture
def verifier(settings):
    return CredentialVerifier.from_settings(settings)


@pytest.fixture
def app(settings, database, asset_store, verifier):
    return create_app(settings=settings, database=database, asset_store=asset_store, verifier=verifier)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def auth_headers(client):
    response = client.post("/auth/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}
