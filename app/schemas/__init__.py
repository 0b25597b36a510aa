"""Pydantic schemas for the rental booking API."""

from app.schemas.auth import *
from app.schemas.property import *
from app.schemas.rental import *
from app.schemas.rental_setting import *
