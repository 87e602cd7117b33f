import logging
import os

from google.cloud import secretmanager
from google.oauth2 import service_account
from google.auth import default as google_auth_default
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger("ollo_backend")

# --- Configuration ---
PROJECT_ID = os.getenv("GOOGLE_CLOUD_PROJECT", "your-project-id")

DATABASE_URL        = os.environ.get("DATABASE_URL", "")
DB_HOST             = os.environ.get("DB_HOST", "localhost")
DB_PORT             = int(os.environ.get("DB_PORT", "5432"))
DB_NAME             = os.environ.get("DB_NAME", "ollo")
DB_USER             = os.environ.get("DB_USER", "postgres")
DB_PASSWORD         = os.environ.get("DB_PASSWORD")
DB_SECRET_ID        = os.environ.get("DB_SECRET_ID")

IS_LOCAL_DB = (not DATABASE_URL and DB_HOST == "localhost")
LOCAL_DB_URL = "sqlite:///ollo.db"


def _build_creds():
    key_path = os.environ.get("GOOGLE_APPLICATION_CREDENTIALS")
    scopes = ["https://www.googleapis.com/auth/cloud-platform"]
    if key_path and os.path.exists(key_path):
        return service_account.Credentials.from_service_account_file(key_path, scopes=scopes)
    creds, _ = google_auth_default(scopes=scopes)
    return creds


def get_db_password() -> str:
    global DB_PASSWORD

    if DB_PASSWORD:
        return DB_PASSWORD

    if DB_SECRET_ID:
        client = secretmanager.SecretManagerServiceClient(credentials=_build_creds())
        name = client.secret_version_path(PROJECT_ID, DB_SECRET_ID, "latest")
        resp = client.access_secret_version(request={"name": name})
        DB_PASSWORD = resp.payload.data.decode("utf-8")
        return DB_PASSWORD

    raise RuntimeError("No DB_PASSWORD and no Secret Manager configured")


def get_db_url() -> str:
    if DATABASE_URL:
        return DATABASE_URL
    if IS_LOCAL_DB:
        return LOCAL_DB_URL
    return f"postgresql+pg8000://{DB_USER}:{get_db_password()}@{DB_HOST}:{DB_PORT}/{DB_NAME}"


def get_db_engine(url: str | None = None):
    url = url or get_db_url()
    if url.startswith("sqlite"):
        logger.info(f"[DB] Using SQLite URL: {url}")
        return create_engine(url)

    logger.info("[DB] Connecting to %s", url.split("@")[-1])
    kwargs = {"pool_pre_ping": True}
    if url.startswith("postgresql+pg8000"):
        # fail in 10s instead of hanging the request
        kwargs["connect_args"] = {"timeout": 10}
    return create_engine(url, **kwargs)


def create_session_factory(url: str | None = None) -> sessionmaker:
    return sessionmaker(bind=get_db_engine(url), autoflush=False, expire_on_commit=False)
