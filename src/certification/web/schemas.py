"""Pydantic schemas for the Web API.

Serialization models for courses, enrollments, evaluations, certificates
and the treasury.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field


# =============================================================================
# HEALTH
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    courses: int
    timestamp: str


class ErrorResponse(BaseModel):
    """Body of every domain error response."""

    error: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# COURSE SCHEMAS
# =============================================================================


class CourseCreate(BaseModel):
    """Request body for creating a course (or adding places)."""

    course_id: int = Field(..., ge=0)
    initial_supply: int = Field(..., ge=0)
    uri: str = Field(default="", max_length=500)
    fee: Decimal | None = Field(default=None, ge=0)


class CourseResponse(BaseModel):
    """Response for a course."""

    course_id: int
    fee_per_place: Decimal
    total_places: int
    places_purchased: int
    passed_count: int
    creator: str | None
    metadata_uri: str
    evaluators: list[str]
    students: list[str]


class EvaluatorAssign(BaseModel):
    """Request body for assigning an evaluator."""

    evaluator: str


class PlacePurchase(BaseModel):
    """Request body for buying a place."""

    value: Decimal = Field(..., ge=0)


class PlaceTransfer(BaseModel):
    """Request body for handing a unit to a student."""

    student: str


# =============================================================================
# EVALUATION SCHEMAS
# =============================================================================


class EvaluationCreate(BaseModel):
    """Request body for recording a mark.

    The range is checked by the core so out-of-range marks report the
    domain error instead of a schema error.
    """

    student: str
    mark: int


class EvaluationResponse(BaseModel):
    """Response for a recorded evaluation."""

    mark: int
    timestamp: str
    student: str
    evaluator: str
    passed: bool


class EvaluationListResponse(BaseModel):
    """Response for a course's evaluations."""

    evaluations: list[EvaluationResponse]
    passed: list[str]
    failed: list[str]
    count: int


# =============================================================================
# CERTIFICATE SCHEMAS
# =============================================================================


class CertificatesCreate(BaseModel):
    """Request body for finalizing a course."""

    certificate_uri: str = Field(..., min_length=1, max_length=500)


class FinalizationResponse(BaseModel):
    """Response for a finalized course."""

    course_id: int
    unsold_burned: int
    certified: list[str]
    revoked: list[str]
    uri: str


# =============================================================================
# TREASURY SCHEMAS
# =============================================================================


class WithdrawalCreate(BaseModel):
    """Request body for a withdrawal."""

    amount: Decimal = Field(..., ge=0)


class TreasuryResponse(BaseModel):
    """Response for the treasury balance."""

    balance: Decimal
