# ecopack/main.py
import anyio
from fastapi import FastAPI, Depends, HTTPException, Header, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from sqlalchemy.orm import Session
from typing import List, Optional
import json, time

from .database import engine, Base, get_db
from . import models, crud, schemas, gemini_client
from .activity_parser import ActivityParseError, parse_activities
from .calculator import Co2eCalculator, get_calculator
from .carbon import calculate_carbon_footprint
from .config import get_settings
from .logging_config import configure_logging, get_logger
from .recommender import recommend
from .utils import parse_leading_float

configure_logging()
logger = get_logger(__name__)

# Create DB tables
Base.metadata.create_all(bind=engine)

app = FastAPI(title="EcoPack Carbon & Packaging API", version="0.3.0")
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    logger.exception("unhandled error", path=request.url.path)
    return JSONResponse(status_code=500, content={"detail": f"Server error: {exc}"})


def get_gemini() -> gemini_client.GeminiClient:
    return gemini_client.default_client()


def require_user(token: Optional[str] = None, x_token: Optional[str] = Header(None),
                 db: Session = Depends(get_db)) -> models.User:
    """Token comes from ?token= or the X-Token header."""
    user = crud.get_user_by_token(db, token or x_token)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid token")
    return user


def _token_out(user: models.User):
    return {"token": user.token or "", "user_id": user.id, "first_name": user.first_name,
            "last_name": user.last_name, "email": user.email}


@app.get("/")
def root():
    return {"message": "EcoPack API running", "version": app.version}


# -----------------
# Auth & profile
# -----------------
@app.post("/signup", response_model=schemas.TokenOut)
def signup(payload: schemas.SignupIn, db: Session = Depends(get_db)):
    if crud.get_user_by_email(db, payload.email):
        raise HTTPException(status_code=400, detail="Email already registered")
    user = crud.create_user(db, payload.first_name, payload.last_name, payload.email, payload.password)
    logger.info("user signed up", user_id=user.id)
    return _token_out(user)


@app.post("/login", response_model=schemas.TokenOut)
def login(payload: schemas.LoginIn, db: Session = Depends(get_db)):
    user = crud.authenticate_user(db, payload.email, payload.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return _token_out(user)


@app.get("/profile", response_model=schemas.UserProfile)
def get_profile(user: models.User = Depends(require_user)):
    return user


@app.put("/profile", response_model=schemas.UserProfile)
def put_profile(payload: schemas.UserProfile, user: models.User = Depends(require_user),
                db: Session = Depends(get_db)):
    return crud.update_profile(db, user, payload.model_dump())


# -----------------
# Activity logging
# -----------------
@app.post("/actions", response_model=schemas.ActionLogOut)
async def log_action(payload: schemas.ActivityIn, user: models.User = Depends(require_user),
                     db: Session = Depends(get_db), calculator: Co2eCalculator = Depends(get_calculator)):
    co2e = await calculator.calculate_for(payload.category, payload.activity, payload.amount, payload.unit, user)
    return await run_in_threadpool(crud.create_action_log, db, user.id, payload.category, payload.activity,
                                   payload.amount, payload.unit, co2e)


@app.post("/actions/ai", response_model=List[schemas.ActionLogOut])
async def log_action_ai(payload: schemas.AiActivityIn, user: models.User = Depends(require_user),
                        db: Session = Depends(get_db), calculator: Co2eCalculator = Depends(get_calculator),
                        gemini: gemini_client.GeminiClient = Depends(get_gemini)):
    if not payload.raw_input.strip():
        raise HTTPException(status_code=400, detail="raw_input is empty")
    try:
        activities = await run_in_threadpool(parse_activities, payload.raw_input, client=gemini)
    except ActivityParseError as e:
        logger.warning("activity parsing failed", error=str(e))
        raise HTTPException(status_code=502, detail=f"Failed to parse activity with AI: {e}")

    out = []
    for a in activities:
        co2e = await calculator.calculate_for(a.category, a.activity, a.amount, a.unit, user)
        out.append(await run_in_threadpool(crud.create_action_log, db, user.id, a.category, a.activity,
                                           a.amount, a.unit, co2e, raw_input=payload.raw_input))
    return out


@app.post("/actions/recalculate")
def recalculate_actions(user: models.User = Depends(require_user), db: Session = Depends(get_db),
                        calculator: Co2eCalculator = Depends(get_calculator)):
    """Re-run the calculator over every stored log, e.g. after a factor or profile change."""
    def compute(log):
        # FOOD is recalculated from the local table only
        if (log.category or "").upper() == "FOOD":
            return calculator.calculate(schemas.ActivityIn(category=log.category, activity=log.activity,
                                                           amount=log.amount, unit=log.unit), user)
        return anyio.from_thread.run(calculator.calculate_for, log.category, log.activity,
                                     log.amount, log.unit, user)

    updated, errors = crud.recalculate_action_logs(db, user.id, compute)
    if not updated and not errors:
        return {"success": False, "message": "No actions found", "updated": 0, "errors": 0}
    return {"success": True, "message": f"Recalculated {updated} actions. {errors} errors.",
            "updated": updated, "errors": errors}


@app.get("/actions", response_model=List[schemas.ActionLogOut])
def list_actions(limit: int = 100, offset: int = 0, user: models.User = Depends(require_user),
                 db: Session = Depends(get_db)):
    return crud.get_action_logs(db, user.id, limit=limit, offset=offset)


@app.delete("/actions/{log_id}")
def delete_action(log_id: str, user: models.User = Depends(require_user), db: Session = Depends(get_db)):
    if not crud.delete_action_log(db, user.id, log_id):
        raise HTTPException(status_code=404, detail="Action not found")
    return {"deleted": log_id}


@app.get("/dashboard-stats", response_model=schemas.DashboardStats)
def dashboard_stats(user: models.User = Depends(require_user), db: Session = Depends(get_db)):
    return crud.dashboard_stats(db, user.id)


@app.get("/leaderboard")
def leaderboard(db: Session = Depends(get_db)):
    return crud.leaderboard_last_7_days(db)


# -----------------
# Packaging recommendations
# -----------------
@app.post("/recommend", response_model=schemas.RecommendationOut)
def create_recommendation(payload: schemas.RecommendationRequest, user: models.User = Depends(require_user),
                          db: Session = Depends(get_db),
                          gemini: gemini_client.GeminiClient = Depends(get_gemini)):
    started = time.perf_counter()
    outcome = recommend(payload, client=gemini)
    ai_seconds = round(time.perf_counter() - started, 2)
    result = outcome.value

    materials = result.recommended_materials
    footprint = calculate_carbon_footprint(
        material_weight=parse_leading_float(payload.product_weight, 0.0),
        material_type=materials[0] if materials else "cardboard",
        shipping_distance=payload.shipping_distance,
        fragility_level=payload.fragility_level,
    )

    data = result.model_dump()
    data["carbon_footprint"] = footprint.model_dump()
    processing = {"ai_processing": ai_seconds}
    rec = crud.create_recommendation(db, user.id, payload.model_dump(), data, outcome.source,
                                     footprint.total_carbon_score)
    processing["total_processing"] = round(time.perf_counter() - started, 2)
    data["processing_time"] = processing
    return {"id": rec.id, "source": outcome.source, "data": data, "processing_time": processing}


@app.get("/recommendations")
def list_recommendations(user: models.User = Depends(require_user), db: Session = Depends(get_db)):
    out = []
    for r in crud.get_recommendations(db, user.id):
        out.append({"id": r.id, "source": r.source, "carbon_score": r.carbon_score,
                    "created_at": r.created_at.isoformat(),
                    "form_input": json.loads(r.form_input or "{}"),
                    "ai_output": json.loads(r.ai_output or "{}")})
    return out


@app.get("/recommendations/{rec_id}")
def get_recommendation(rec_id: str, user: models.User = Depends(require_user), db: Session = Depends(get_db)):
    r = crud.get_recommendation(db, user.id, rec_id)
    if not r:
        raise HTTPException(status_code=404, detail="Recommendation not found")
    return {"id": r.id, "source": r.source, "carbon_score": r.carbon_score,
            "created_at": r.created_at.isoformat(),
            "form_input": json.loads(r.form_input or "{}"),
            "ai_output": json.loads(r.ai_output or "{}")}


@app.delete("/recommendations/{rec_id}")
def delete_recommendation(rec_id: str, user: models.User = Depends(require_user), db: Session = Depends(get_db)):
    if not crud.delete_recommendation(db, user.id, rec_id):
        raise HTTPException(status_code=404, detail="Recommendation not found")
    return {"deleted": rec_id}


@app.get("/models/check")
def check_models(gemini: gemini_client.GeminiClient = Depends(get_gemini)):
    if not gemini.configured:
        return {"error": "No GEMINI_API_KEY found"}
    return gemini.probe_models(get_settings().gemini_model_ids)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("ecopack.main:app", host="0.0.0.0", port=8000, reload=True)
