# ecopack/models.py
from sqlalchemy import Column, String, Integer, Float, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from .database import Base
import uuid


def gen_id(prefix):
    return f"{prefix}_{uuid.uuid4().hex[:8]}"


def utcnow():
    return datetime.utcnow()


class User(Base):
    __tablename__ = "users"
    id = Column(String, primary_key=True, default=lambda: gen_id("user"))
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False)
    password_hash = Column(String, nullable=False)
    token = Column(String, nullable=True, index=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # profile answers used to personalise emission factors
    primary_vehicle_type = Column(String, nullable=True)
    fuel_type = Column(String, nullable=True)  # Petrol | Diesel | Electric | Hybrid
    household_size = Column(Integer, nullable=True)
    diet_type = Column(String, nullable=True)
    home_energy_source = Column(String, nullable=True)
    commute_distance = Column(Float, nullable=True)
    commute_mode = Column(String, nullable=True)

    actions = relationship("ActionLog", back_populates="user", cascade="all, delete-orphan")
    recommendations = relationship("Recommendation", back_populates="user", cascade="all, delete-orphan")


class ActionLog(Base):
    __tablename__ = "action_logs"
    id = Column(String, primary_key=True, default=lambda: gen_id("action"))
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    category = Column(String, nullable=False)  # TRANSPORT, FOOD, ENERGY, PACKAGING, WASTE
    activity = Column(String, nullable=False)
    amount = Column(Float, nullable=False)
    unit = Column(String, nullable=False)
    calculated_co2e = Column(Float, nullable=False, default=0.0)
    raw_input = Column(Text, nullable=True)  # original sentence when logged via AI
    logged_at = Column(DateTime, default=utcnow)

    user = relationship("User", back_populates="actions")


class Recommendation(Base):
    __tablename__ = "recommendations"
    id = Column(String, primary_key=True, default=lambda: gen_id("rec"))
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    form_input = Column(Text, nullable=False)  # JSON string
    ai_output = Column(Text, nullable=False)  # JSON string
    source = Column(String, nullable=False, default="local")
    carbon_score = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime, default=utcnow)

    user = relationship("User", back_populates="recommendations")
