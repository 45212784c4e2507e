"""Entities owned by the listing, motorsports and booking modules.

Only the columns conversations join against are mapped here.
"""

from sqlalchemy import Column, Date, Float, ForeignKey, Integer, Text
from sqlalchemy.types import Uuid

from .base import BaseModel


class Vehicle(BaseModel):
    __tablename__ = "vehicles"

    owner_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    make = Column(Text, nullable=False)
    model = Column(Text, nullable=False)
    year = Column(Integer, nullable=False)


class Team(BaseModel):
    __tablename__ = "teams"

    owner_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    name = Column(Text, nullable=False)


class DriverProfile(BaseModel):
    __tablename__ = "driver_profiles"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    headline = Column(Text, nullable=True)


class Reservation(BaseModel):
    __tablename__ = "reservations"

    vehicle_id = Column(Uuid(as_uuid=True), ForeignKey("vehicles.id"), nullable=False)
    renter_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    owner_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(Text, nullable=False, default="pending")
    total_amount = Column(Float, nullable=False, default=0.0)
