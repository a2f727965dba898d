# ecopack/crud.py
from . import models
from .logging_config import get_logger
from sqlalchemy import func
from sqlalchemy.orm import Session
from passlib.context import CryptContext
from collections import defaultdict
from datetime import datetime, timedelta
import uuid, json

logger = get_logger(__name__)
pwd_ctx = CryptContext(schemes=["bcrypt"], deprecated="auto")

PROFILE_FIELDS = (
    "primary_vehicle_type", "fuel_type", "household_size", "diet_type",
    "home_energy_source", "commute_distance", "commute_mode",
)


# Auth
def create_user(db: Session, first_name, last_name, email, password):
    hashed = pwd_ctx.hash(password)
    user = models.User(first_name=first_name, last_name=last_name, email=email,
                       password_hash=hashed, token=uuid.uuid4().hex)
    db.add(user); db.commit(); db.refresh(user)
    return user


def authenticate_user(db: Session, email, password):
    user = get_user_by_email(db, email)
    if not user:
        return None
    if not pwd_ctx.verify(password, user.password_hash):
        return None
    user.token = uuid.uuid4().hex
    db.add(user); db.commit(); db.refresh(user)
    return user


def get_user_by_token(db: Session, token):
    if not token:
        return None
    return db.query(models.User).filter(models.User.token == token).first()


def get_user_by_email(db: Session, email):
    return db.query(models.User).filter(models.User.email == email).first()


# Profile
def update_profile(db: Session, user, values: dict):
    """Last write wins; None and empty strings leave the stored value alone."""
    for field in PROFILE_FIELDS:
        value = values.get(field)
        if value is None or value == "":
            continue
        setattr(user, field, value)
    db.add(user); db.commit(); db.refresh(user)
    return user


# Action logs
def create_action_log(db: Session, user_id, category, activity, amount, unit, co2e, raw_input=None):
    log = models.ActionLog(user_id=user_id, category=category, activity=activity, amount=amount,
                           unit=unit, calculated_co2e=co2e, raw_input=raw_input)
    db.add(log); db.commit(); db.refresh(log)
    return log


def get_action_logs(db: Session, user_id, limit=100, offset=0):
    return (db.query(models.ActionLog)
            .filter(models.ActionLog.user_id == user_id)
            .order_by(models.ActionLog.logged_at.desc())
            .offset(offset).limit(limit).all())


def delete_action_log(db: Session, user_id, log_id):
    log = db.query(models.ActionLog).filter(models.ActionLog.id == log_id,
                                            models.ActionLog.user_id == user_id).first()
    if not log:
        return False
    db.delete(log); db.commit()
    return True


def recalculate_action_logs(db: Session, user_id, compute, limit=1000):
    """Store compute(log) as each log's CO2e. Returns (updated, errors)."""
    updated = errors = 0
    for log in get_action_logs(db, user_id, limit=limit):
        try:
            log.calculated_co2e = compute(log)
            updated += 1
        except Exception as e:
            logger.warning("recalculation failed", log_id=log.id, error=str(e))
            errors += 1
    db.commit()
    return updated, errors


def dashboard_stats(db: Session, user_id, now=None):
    now = now or datetime.utcnow()
    month_start = datetime(now.year, now.month, 1)
    logs = db.query(models.ActionLog).filter(models.ActionLog.user_id == user_id).all()

    total = 0.0
    month_total, month_count = 0.0, 0
    breakdown = defaultdict(float)
    for log in logs:
        value = log.calculated_co2e or 0.0
        total += value
        breakdown[log.category] += value
        if log.logged_at and log.logged_at >= month_start:
            month_total += value
            month_count += 1

    return {
        "total_co2e": round(total, 3),
        "total_actions": len(logs),
        "this_month_co2e": round(month_total, 3),
        "this_month_actions": month_count,
        "category_breakdown": {k: round(v, 3) for k, v in breakdown.items()},
        "average_per_action": round(total / len(logs), 3) if logs else 0.0,
    }


# Leaderboard
def leaderboard_last_7_days(db: Session, now=None, limit=100):
    """Users with activity in the last 7 days, lowest total emissions first."""
    cutoff = (now or datetime.utcnow()) - timedelta(days=7)
    rows = (db.query(models.User.id, models.User.first_name, models.User.last_name,
                     func.sum(models.ActionLog.calculated_co2e))
            .join(models.ActionLog)
            .filter(models.ActionLog.logged_at >= cutoff)
            .group_by(models.User.id)
            .all())
    result = [{"user_id": uid, "name": f"{name} {lname}", "last7_kgco2": round(total or 0.0, 4)}
              for uid, name, lname, total in rows]
    result.sort(key=lambda x: x["last7_kgco2"])
    return result[:limit]


# Recommendations
def create_recommendation(db: Session, user_id, form_input, ai_output, source, carbon_score):
    rec = models.Recommendation(user_id=user_id, form_input=json.dumps(form_input),
                                ai_output=json.dumps(ai_output), source=source,
                                carbon_score=carbon_score)
    db.add(rec); db.commit(); db.refresh(rec)
    return rec


def get_recommendations(db: Session, user_id):
    return (db.query(models.Recommendation)
            .filter(models.Recommendation.user_id == user_id)
            .order_by(models.Recommendation.created_at.desc()).all())


def get_recommendation(db: Session, user_id, rec_id):
    return (db.query(models.Recommendation)
            .filter(models.Recommendation.id == rec_id, models.Recommendation.user_id == user_id)
            .first())


def delete_recommendation(db: Session, user_id, rec_id):
    rec = get_recommendation(db, user_id, rec_id)
    if not rec:
        return False
    db.delete(rec); db.commit()
    return True
