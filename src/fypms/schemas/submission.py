"""Pydantic schemas for proposals and projects."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from fypms.schemas.people import StudentSummary, SupervisorSummary


class ProposalCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None


class ProposalRead(BaseModel):
    id: uuid.UUID = Field(serialization_alias="_id")
    title: str
    description: str
    status: str
    submitted_by: Optional[StudentSummary] = Field(
        None, validation_alias="student", serialization_alias="submittedBy"
    )
    created_at: Optional[datetime] = Field(None, serialization_alias="createdAt")
    updated_at: Optional[datetime] = Field(None, serialization_alias="updatedAt")

    model_config = {"from_attributes": True, "populate_by_name": True}


class ProjectCreate(BaseModel):
    title: Optional[str] = None
    file_url: Optional[str] = Field(None, alias="fileUrl")
    file_public_id: Optional[str] = Field(None, alias="filePublicId")
    proposal_id: Optional[uuid.UUID] = Field(None, alias="proposalId")

    model_config = {"populate_by_name": True}


class ProjectRead(BaseModel):
    id: uuid.UUID = Field(serialization_alias="_id")
    title: str
    status: str
    file_url: str = Field(serialization_alias="fileUrl")
    file_public_id: Optional[str] = Field(None, serialization_alias="filePublicId")
    proposal_id: Optional[uuid.UUID] = Field(None, serialization_alias="proposalId")
    submitted_by: Optional[StudentSummary] = Field(
        None, validation_alias="student", serialization_alias="submittedBy"
    )
    supervisor: Optional[SupervisorSummary] = None
    created_at: Optional[datetime] = Field(None, serialization_alias="createdAt")
    updated_at: Optional[datetime] = Field(None, serialization_alias="updatedAt")

    model_config = {"from_attributes": True, "populate_by_name": True}


class StatusUpdate(BaseModel):
    status: Optional[str] = None
