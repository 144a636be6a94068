"""
Wire models for the mocked trace-ingestion API.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field


THROTTLING_EXCEPTION = "ThrottlingException"


class PutTraceSegmentsRequest(BaseModel):
    """PutTraceSegments body; each document is one trace segment."""
    TraceSegmentDocuments: List[Any] = Field(default_factory=list)

    @property
    def load(self) -> int:
        return len(self.TraceSegmentDocuments)


class UnprocessedTraceSegment(BaseModel):
    Id: str = ""
    ErrorCode: str = ""
    Message: str = ""


class PutTraceSegmentsResponse(BaseModel):
    UnprocessedTraceSegments: List[UnprocessedTraceSegment] = Field(
        default_factory=lambda: [UnprocessedTraceSegment()]
    )


class ThrottlingExceptionBody(BaseModel):
    """Error body returned with HTTP 429."""
    message: str = "Rate exceeded"
    type: str = Field(default=THROTTLING_EXCEPTION, serialization_alias="__type")


class ThrottleResponse(BaseModel):
    """Acknowledgement for a SetThrottled call."""
    rate: int
    message: Optional[str] = None
