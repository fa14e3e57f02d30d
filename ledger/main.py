"""
FastAPI application for the Bet Ledger
REST API over the normalized bet store
"""

from fastapi import FastAPI, Depends, HTTPException, Query, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from sqlalchemy import text
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional
import logging
import os

from ledger.models import get_db, init_db
from ledger.auth import verify_api_key
from ledger.core.record import BuildResult
from ledger.core.taxonomy import BOOKMAKERS, BET_TYPES, PLAYER_PROP_MARKETS
from ledger.services.bet_ledger import (
    create_bet,
    update_bet,
    delete_bet,
    get_bet,
    list_bets,
    serialize_bet,
)
from ledger.services.performance import calculate_summary_stats, calculate_history
from ledger.schemas import (
    BetCreate,
    BetUpdate,
    BetResponse,
    BetPageResponse,
    FieldErrorResponse,
    RejectedBetResponse,
    ValidationFailure,
)

# Logging setup
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

APP_VERSION = "1.0"
DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "25"))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    logger.info("🚀 Starting Bet Ledger")
    init_db()
    yield
    logger.info("👋 Shutting down Bet Ledger")


app = FastAPI(
    title="Bet Ledger",
    description="Personal sports betting ledger",
    version=APP_VERSION,
    lifespan=lifespan,
)

# CORS (comma-separated CORS_ORIGIN; Streamlit by default)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.getenv("CORS_ORIGIN", "http://localhost:8501").split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _rejected(outcome: BuildResult) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail=ValidationFailure(
            errors=[FieldErrorResponse(field=e.field, message=e.message) for e in outcome.errors],
        ).model_dump(),
    )


# ============================================================================
# PUBLIC ENDPOINTS
# ============================================================================

@app.get("/")
async def root():
    """Health check"""
    return {
        "app": "Bet Ledger",
        "version": APP_VERSION,
        "status": "operational",
        "timestamp": datetime.utcnow().isoformat(),
    }


@app.get("/health")
async def health_check(db: Session = Depends(get_db)):
    """Health check endpoint"""
    health = {"status": "healthy", "database": "connected"}

    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Health check database error: %s", e)
        health["status"] = "degraded"
        health["database"] = f"error: {str(e)}"

    return health


# ============================================================================
# REFERENCE DATA
# ============================================================================

@app.get("/api/bookmakers")
async def get_bookmakers(user: str = Depends(verify_api_key)):
    return {"bookmakers": list(BOOKMAKERS)}


@app.get("/api/bet-types")
async def get_bet_types(user: str = Depends(verify_api_key)):
    return {"bet_types": list(BET_TYPES)}


@app.get("/api/player-prop-markets")
async def get_player_prop_markets(user: str = Depends(verify_api_key)):
    return {"player_prop_markets": list(PLAYER_PROP_MARKETS)}


# ============================================================================
# AUTHENTICATED ENDPOINTS - BETS
# ============================================================================

@app.get("/api/bets", response_model=BetPageResponse)
async def get_bets(
    search: Optional[str] = Query(default=None, description="Matches fixture or selection"),
    bookmaker: Optional[str] = Query(default=None),
    result: Optional[str] = Query(default=None, description="OPEN | WON | LOST | VOID"),
    bet_type: Optional[str] = Query(default=None),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=200),
    user: str = Depends(verify_api_key),
    db: Session = Depends(get_db),
):
    """Filtered, newest-first page of the caller's bets."""
    return list_bets(
        db,
        user,
        search=search,
        bookmaker=bookmaker,
        result=result,
        bet_type=bet_type,
        page=page,
        page_size=page_size,
    )


@app.get("/api/bets/{bet_id}", response_model=BetResponse)
async def get_single_bet(
    bet_id: int,
    user: str = Depends(verify_api_key),
    db: Session = Depends(get_db),
):
    bet = get_bet(db, user, bet_id)
    if not bet:
        raise HTTPException(status_code=404, detail="Bet not found")
    return serialize_bet(bet)


@app.post(
    "/api/bets",
    response_model=BetResponse,
    status_code=201,
    responses={422: {"model": RejectedBetResponse}},
)
async def post_bet(
    payload: BetCreate,
    user: str = Depends(verify_api_key),
    db: Session = Depends(get_db),
):
    """Record a bet.  Hard-fail fields are reported together with a 422."""
    bet, outcome = create_bet(db, user, payload.to_raw())
    if bet is None:
        logger.info("Bet rejected for %s: %s", user, "; ".join(str(e) for e in outcome.errors))
        raise _rejected(outcome)
    return serialize_bet(bet)


@app.put(
    "/api/bets/{bet_id}",
    response_model=BetResponse,
    responses={422: {"model": RejectedBetResponse}},
)
async def put_bet(
    bet_id: int,
    payload: BetUpdate,
    user: str = Depends(verify_api_key),
    db: Session = Depends(get_db),
):
    """
    Partial update.  Result, cash-out value, potential return and profit are
    always re-derived from the merged bet.
    """
    bet = get_bet(db, user, bet_id)
    if not bet:
        raise HTTPException(status_code=404, detail="Bet not found")

    outcome = update_bet(db, bet, payload.to_raw())
    if not outcome.ok:
        raise _rejected(outcome)
    return serialize_bet(bet)


@app.delete("/api/bets/{bet_id}", status_code=204)
async def remove_bet(
    bet_id: int,
    user: str = Depends(verify_api_key),
    db: Session = Depends(get_db),
):
    bet = get_bet(db, user, bet_id)
    if not bet:
        raise HTTPException(status_code=404, detail="Bet not found")
    delete_bet(db, bet)
    return Response(status_code=204)


# ============================================================================
# AUTHENTICATED ENDPOINTS - PERFORMANCE
# ============================================================================

@app.get("/api/performance/summary")
async def get_performance_summary(
    user: str = Depends(verify_api_key),
    db: Session = Depends(get_db),
):
    """
    P&L summary: overall metrics, by-bookmaker and by-bet-type breakdowns.
    Bets with undetermined profit are counted but left out of the totals.
    """
    return calculate_summary_stats(db, user)


@app.get("/api/performance/history")
async def get_performance_history(
    user: str = Depends(verify_api_key),
    db: Session = Depends(get_db),
):
    """Cumulative P&L series for the dashboard chart."""
    return calculate_history(db, user)


# ============================================================================
# ERROR HANDLERS
# ============================================================================

@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Catch-all exception handler"""
    logger.error("Unhandled exception: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "type": type(exc).__name__}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
