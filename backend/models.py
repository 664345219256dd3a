"""Pydantic models for API requests and responses."""

from typing import Any, List, Optional
from pydantic import BaseModel, Field

from compliance.core.models import Credentials


# ═══════════════════════════════════════════════════════
# Credentials
# ═══════════════════════════════════════════════════════

class CredentialsRequest(BaseModel):
    """Supabase project credentials."""
    endpoint_url: str = Field(..., description="Project URL (https://<project>.supabase.co)")
    data_plane_key: str = Field(..., description="Service role key")
    management_key: str = Field(..., description="Management API access token")
    project_id: Optional[str] = Field(None, description="Project ref; derived from the URL if omitted")

    def to_credentials(self) -> Credentials:
        return Credentials(
            endpoint_url=self.endpoint_url,
            data_plane_key=self.data_plane_key,
            management_key=self.management_key,
            project_id=self.project_id,
        )


# ═══════════════════════════════════════════════════════
# Check Models
# ═══════════════════════════════════════════════════════

class CheckResultModel(BaseModel):
    """Single check result."""
    status: str = Field(..., description="pass / fail / pending / error")
    message: str = Field("", description="Human-readable summary")
    details: Any = Field(None, description="Structured details")


class ResultsResponse(BaseModel):
    """Results of all three checks."""
    mfa: CheckResultModel
    rls: CheckResultModel
    pitr: CheckResultModel


class EvidenceEntryModel(BaseModel):
    """Evidence log entry."""
    timestamp: str = Field(..., description="Run timestamp (ISO format)")
    check: str = Field(..., description="Check name (MFA/RLS/PITR)")
    status: str = Field(..., description="Check status")
    details: str = Field(..., description="Result message")


class RunResponse(BaseModel):
    """Response for run endpoint."""
    results: ResultsResponse
    new_entries: List[EvidenceEntryModel] = Field(..., description="Entries appended by this run")


# ═══════════════════════════════════════════════════════
# Evidence Models
# ═══════════════════════════════════════════════════════

class EvidenceResponse(BaseModel):
    """Evidence log response."""
    entries: List[EvidenceEntryModel]
    count: int


class ClearResponse(BaseModel):
    """Response for clear endpoint."""
    status: str
    removed: int = Field(..., description="Number of removed entries")


# ═══════════════════════════════════════════════════════
# Remediation Models
# ═══════════════════════════════════════════════════════

class RemediationResponse(BaseModel):
    """Response for remediation endpoints."""
    status: str
    message: str


# ═══════════════════════════════════════════════════════
# Health Models
# ═══════════════════════════════════════════════════════

class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field(..., description="Service status")
    version: str = Field(..., description="Package version")
    running: bool = Field(False, description="Whether a check run is in progress")
