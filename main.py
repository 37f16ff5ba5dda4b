"""
Kundli Engine — FastAPI adapter
===============================
Endpoints:
  POST /api/kundli        — Birth chart + Vimshottari timeline
  POST /api/dasha/active  — Active Maha/Antar/Pratyantar/Sukshma dasha at an instant
  GET  /api/health        — Health check
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from kundli_engine import BirthMoment, KundliError, compute_chart, compute_dasha
from kundli_engine.config import get_settings

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Kundli Engine API",
    version="1.0.0",
    description="Sidereal birth chart and Vimshottari Dasha timeline",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request Models ─────────────────────────────────────────────

class BirthData(BaseModel):
    birth_date: str            = Field(..., description="YYYY-MM-DD")
    birth_time: str            = Field(..., description="HH:MM:SS, local time")
    latitude:   float
    longitude:  float
    timezone:   Optional[str]  = Field(None, description="IANA zone, e.g. Asia/Kolkata")
    ayanamsa:   Optional[int]  = Field(None, description="1=Lahiri, 2=Raman, 3=KP, 4=other (linear Lahiri)")


class KundliRequest(BirthData):
    dasha_depth: int = Field(2, ge=1, le=4)


class ActiveDashaRequest(BirthData):
    at: Optional[datetime] = Field(None, description="Instant to query, default now")


# ── Utilities ──────────────────────────────────────────────────

def _birth(data: BirthData) -> BirthMoment:
    return BirthMoment.from_strings(
        data.birth_date, data.birth_time,
        data.latitude, data.longitude,
        timezone=data.timezone, ayanamsa=data.ayanamsa,
    )


# ── Endpoints ──────────────────────────────────────────────────

@app.get("/api/health")
def health():
    return {
        "status": "ok",
        "service": "Kundli Engine API",
        "version": "1.0.0",
        "endpoints": [
            "POST /api/kundli",
            "POST /api/dasha/active",
        ],
    }


@app.post("/api/kundli")
def kundli_endpoint(data: KundliRequest):
    try:
        chart = compute_chart(_birth(data))
        tree = compute_dasha(chart)
    except KundliError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "success": True,
        "chart": chart.to_dict(),
        "dasha": tree.to_dict(depth=data.dasha_depth),
    }


@app.post("/api/dasha/active")
def active_dasha_endpoint(data: ActiveDashaRequest):
    at = data.at or datetime.now(timezone.utc)
    try:
        chart = compute_chart(_birth(data))
        active = compute_dasha(chart).active_at(at)
    except KundliError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "success": True,
        "moon_nakshatra": chart.nakshatra.name,
        "lords": list(active.lords),
        "periods": active.to_dict(),
    }
