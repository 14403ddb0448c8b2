import os
import threading
from dotenv import load_dotenv

load_dotenv()


def _database_url() -> str:
    url = os.environ.get("DATABASE_URL")
    if url:
        return url

    host = os.environ.get("POSTGRES_URL")
    if host:
        user = os.environ.get("POSTGRES_USER")
        password = os.environ.get("POSTGRES_PASSWORD")
        db = os.environ.get("POSTGRES_DB")
        return f"postgresql://{user}:{password}@{host}/{db}"

    return "sqlite:///./labrecord.db"


class BackendSettings:
    _instance = None
    _lock = threading.Lock()

    def __init__(self):
        self.DEBUG_MODE = os.environ.get("DEBUG_MODE", "development")
        self.LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
        self.DATABASE_URL = _database_url()
        # Remote code execution (piston compatible)
        self.EXECUTION_API_URL = os.environ.get("EXECUTION_API_URL", "https://emkc.org/api/v2/piston/execute")
        self.EXECUTION_HTTP_TIMEOUT = float(os.environ.get("EXECUTION_HTTP_TIMEOUT", "30"))
        self.EXECUTION_RUN_TIMEOUT_MS = int(os.environ.get("EXECUTION_RUN_TIMEOUT_MS", "10000"))
        self.EXECUTION_COMPILE_TIMEOUT_MS = int(os.environ.get("EXECUTION_COMPILE_TIMEOUT_MS", "10000"))
        # Provisioning
        self.DEFAULT_DEPARTMENT = os.environ.get("DEFAULT_DEPARTMENT", "CSE")
        self.IDENTITY_WEBHOOK_SECRET = os.environ.get("IDENTITY_WEBHOOK_SECRET", None)

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(BackendSettings, cls).__new__(cls)
        return cls._instance

settings = BackendSettings()
