from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

ProcessingType = Literal["transcribe-only", "full-analysis"]
ProcessingStatus = Literal["draft", "transcribed", "analyzed", "completed"]


class JournalEntryCreateRequest(BaseModel):
    content: str = ""
    transcription: Optional[str] = None
    audioUrl: Optional[str] = None
    processingType: ProcessingType = "full-analysis"
    processingStatus: ProcessingStatus = "draft"


class JournalEntryUpdateRequest(BaseModel):
    content: Optional[str] = None
    transcription: Optional[str] = None
    audioUrl: Optional[str] = None
    processingType: Optional[ProcessingType] = None
    processingStatus: Optional[ProcessingStatus] = None


class CheckInCreateRequest(BaseModel):
    mood: str = Field(min_length=1)
    energy: float = Field(default=0, ge=0, le=10)
    sleepHours: float = Field(default=0, ge=0, le=24)
    sleepMinutes: float = Field(default=0, ge=0, lt=60)
    note: Optional[str] = None


class CreatedResponse(BaseModel):
    id: str


class RecapGenerateRequest(BaseModel):
    type: Literal["weekly", "monthly"] = "weekly"
    userId: str = Field(min_length=1)


class NudgeInteractionRequest(BaseModel):
    nudgeId: str = Field(min_length=1)
    action: Literal["dismissed", "completed", "snoozed", "ignored"]
    feedback: Optional[str] = None


class LifeAreaUpdateRequest(BaseModel):
    currentScore: Optional[float] = Field(default=None, ge=0, le=10)
    targetScore: Optional[float] = Field(default=None, ge=0, le=10)
    description: Optional[str] = None
