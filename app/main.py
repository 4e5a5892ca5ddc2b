# File: app/main.py
# Project: citizen-complaints-backend

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from app.core.config import cors_origins_list
from app.core.errors import register_exception_handlers
from app.core.logging import configure_logging
from app.core.ratelimit import limiter
from app.db.base import import_models
from app.routers import agencies, auth, categories, citizens, complaints, public

configure_logging()
import_models()

app = FastAPI(title="Citizen Complaints API")
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins_list(),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

@app.get("/health")
def health():
    return {"status": "ok"}

app.include_router(auth.router)
app.include_router(citizens.router)
app.include_router(agencies.router)
app.include_router(categories.router)
app.include_router(complaints.router)
app.include_router(public.router)
