import os

# app.main builds an engine at import time; keep it off the production database.
os.environ.setdefault("DATABASE_URL", "sqlite://")
