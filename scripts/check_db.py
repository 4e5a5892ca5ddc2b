# File: scripts/check_db.py
# Project: citizen-complaints-backend

from dotenv import load_dotenv
import os
from sqlalchemy import create_engine, text

load_dotenv(override=True)

url = os.getenv("DATABASE_URL")
if not url:
    raise SystemExit("DATABASE_URL is not set")

engine = create_engine(url, pool_pre_ping=True)

with engine.connect() as conn:
    print("select 1 ->", conn.scalar(text("select 1")))
    print("complaints table ->", conn.scalar(text("select count(*) from complaints")))
