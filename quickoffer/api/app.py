"""FastAPI application entry point."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from quickoffer.api.routes import buyers, estimate, properties, underwrite
from quickoffer.config import settings

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Quick Offer Estimator",
    description="Comparable-based rent and flip offer estimates",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(properties.router)
app.include_router(underwrite.router)
app.include_router(estimate.router)
app.include_router(buyers.router)


@app.get("/health")
async def health():
    return {"status": "ok"}
