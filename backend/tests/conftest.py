"""
Point the app at a throwaway SQLite database and in-memory session slots.
Runs before any test module imports grnd.
"""
import os
import tempfile

_tmp = tempfile.mkdtemp(prefix="grnd-tests-")
os.environ["DB_URL"] = f"sqlite:///{os.path.join(_tmp, 'grnd.db')}"
os.environ["SESSION_STORE"] = "memory"
os.environ["SESSION_DIR"] = os.path.join(_tmp, "sessions")

from grnd.db import Base, engine  # noqa: E402
from grnd import models  # noqa: E402,F401

Base.metadata.create_all(engine)
