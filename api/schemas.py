"""
Pydantic schemas for API contracts.
Keeps transport shapes apart from the pipeline models.
"""
from typing import Literal, Dict, Any, List
from datetime import datetime
from pydantic import BaseModel, Field

from repetidoras.schema.orchestrator_models import BatchSummary


class NormalizeRequest(BaseModel):
    """
    Raw dataset as published by the repeater feed.
    Records stay as plain objects; validation happens per record in the pipeline.
    """
    rptrs: List[Dict[str, Any]]


class NormalizeResponse(BaseModel):
    """
    Batch summary. Compare records_in/records_out to detect dropped records.
    """
    total_states: int
    records_in: int
    records_out: int
    records_dropped: int
    processed_states: List[str]
    contents: Dict[str, List[Dict[str, Any]]]

    @classmethod
    def from_summary(cls, summary: BatchSummary) -> "NormalizeResponse":
        return cls(
            total_states=summary.total_states,
            records_in=summary.records_in,
            records_out=summary.records_out,
            records_dropped=summary.records_dropped,
            processed_states=summary.processed_states,
            contents=summary.contents_json(),
        )


class ModelRowsResponse(BaseModel):
    """
    Channel-programming model as rows (header excluded).
    """
    model: str
    columns: List[str]
    rows: List[List[Any]]


class HealthResponse(BaseModel):
    """
    Health check response.
    """
    status: Literal["healthy", "degraded", "unhealthy"]
    version: str
    timestamp: datetime = Field(default_factory=datetime.now)
    checks: Dict[str, bool] = Field(default_factory=dict)
