"""Pydantic schemas for admins, supervisors and students.

Learn: "Create"/"Update" schemas are inputs, "Read" schemas are the
public projections returned to clients. Read schemas list their fields
explicitly — password_hash and refresh_token have no field here, so they
can never leak into a response.

Input fields are Optional on purpose: missing/blank values are reported
by the service layer with a domain message (400) instead of a generic
schema error.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class _Input(BaseModel):
    model_config = {"populate_by_name": True}


class _Read(BaseModel):
    model_config = {"from_attributes": True, "populate_by_name": True}


# ─── Admins ─────────────────────────────────────────────

class AdminRead(_Read):
    id: uuid.UUID = Field(serialization_alias="_id")
    email: str
    role: str


# ─── Supervisors ────────────────────────────────────────

class SupervisorCreate(_Input):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    department: Optional[str] = None


class SupervisorUpdate(_Input):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    department: Optional[str] = None


class SupervisorRead(_Read):
    id: uuid.UUID = Field(serialization_alias="_id")
    name: str
    email: str
    department: Optional[str] = None
    role: str
    created_at: Optional[datetime] = Field(None, serialization_alias="createdAt")


class SupervisorSummary(_Read):
    name: str
    email: str


# ─── Students ───────────────────────────────────────────

class StudentCreate(_Input):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    roll_number: Optional[str] = Field(None, alias="rollNumber")


class StudentUpdate(_Input):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    roll_number: Optional[str] = Field(None, alias="rollNumber")


class StudentRead(_Read):
    id: uuid.UUID = Field(serialization_alias="_id")
    name: str
    email: str
    roll_number: str = Field(serialization_alias="rollNumber")
    role: str
    added_by: uuid.UUID = Field(serialization_alias="addedBy")
    created_at: Optional[datetime] = Field(None, serialization_alias="createdAt")


class StudentSummary(_Read):
    name: str
    email: str
    roll_number: str = Field(serialization_alias="rollNumber")
