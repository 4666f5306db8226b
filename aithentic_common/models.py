# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Data model for the grading pipeline.

Grading results travel through the pipeline as plain dictionaries (the
decoded form of the DynamoDB typed-attribute item). The dataclasses here give
typed access to the same data and define the batch report records.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

# Required top-level fields of a grading result, in validation order
REQUIRED_RESULT_FIELDS = (
    "analyticsId",
    "assignmentId",
    "gradeReceived",
    "aiGeneratedAnalytics",
    "plagarismAnalytics",
    "gradeReasoning",
    "remarks",
)


class BatchItemStatus(Enum):
    """Outcome of grading a single assignment."""

    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


@dataclass(frozen=True)
class GradingRequest:
    """A single assignment ready to be sent to the grading endpoint."""

    document_text: str
    document_id: str
    analytics_batch_id: int

    def __post_init__(self):
        try:
            int(self.document_id, 10)
        except (TypeError, ValueError):
            raise ValueError(
                f"document_id must be a base-10 integer, got {self.document_id!r}"
            )

    def to_payload(self, prompt: Optional[str] = None) -> Dict[str, Any]:
        """Build the JSON body sent to the grading endpoint."""
        payload: Dict[str, Any] = {
            "assignmentText": self.document_text,
            "assignmentId": self.document_id,
            "analyticsId": self.analytics_batch_id,
        }
        if prompt:
            payload["prompt"] = prompt
        return payload


@dataclass
class AIGeneratedAnalytics:
    is_ai_used: bool = False
    percentage_of_ai_used: float = 0
    highlighted_area_of_ai_use: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "AIGeneratedAnalytics":
        data = data or {}
        return cls(
            is_ai_used=bool(data.get("isAIUsed", False)),
            percentage_of_ai_used=data.get("percentageOfAIUsed", 0),
            highlighted_area_of_ai_use=list(data.get("highlightedAreaOfAIUse") or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isAIUsed": self.is_ai_used,
            "percentageOfAIUsed": self.percentage_of_ai_used,
            "highlightedAreaOfAIUse": list(self.highlighted_area_of_ai_use),
        }


@dataclass
class PlagiarismAnalytics:
    is_plagiarised: bool = False
    plagiarised_percentage: float = 0
    plagiarised_from: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "PlagiarismAnalytics":
        data = data or {}
        return cls(
            is_plagiarised=bool(data.get("isPlagarised", False)),
            plagiarised_percentage=data.get("plagarisedPercentage", 0),
            plagiarised_from=list(data.get("plagarisedFrom") or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        # Attribute names keep the table's existing spelling
        return {
            "isPlagarised": self.is_plagiarised,
            "plagarisedPercentage": self.plagiarised_percentage,
            "plagarisedFrom": list(self.plagiarised_from),
        }


@dataclass
class GradingResult:
    """
    Canonical grading result for one assignment.

    Percentages and the grade are on a 0..100 scale. gradeReasoning and
    remarks are requested to stay under 60 words; this is not enforced.
    """

    analytics_id: int
    assignment_id: int
    grade_received: float
    ai_generated_analytics: AIGeneratedAnalytics = field(
        default_factory=AIGeneratedAnalytics
    )
    plagiarism_analytics: PlagiarismAnalytics = field(
        default_factory=PlagiarismAnalytics
    )
    grade_reasoning: str = ""
    remarks: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GradingResult":
        """Create a GradingResult from the decoded item dictionary."""
        if not data:
            raise ValueError("Cannot create GradingResult from empty data")

        return cls(
            analytics_id=data.get("analyticsId"),
            assignment_id=data.get("assignmentId"),
            grade_received=data.get("gradeReceived"),
            ai_generated_analytics=AIGeneratedAnalytics.from_dict(
                data.get("aiGeneratedAnalytics")
            ),
            plagiarism_analytics=PlagiarismAnalytics.from_dict(
                data.get("plagarismAnalytics")
            ),
            grade_reasoning=data.get("gradeReasoning", ""),
            remarks=data.get("remarks", ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the decoded item dictionary."""
        return {
            "analyticsId": self.analytics_id,
            "assignmentId": self.assignment_id,
            "gradeReceived": self.grade_received,
            "aiGeneratedAnalytics": self.ai_generated_analytics.to_dict(),
            "plagarismAnalytics": self.plagiarism_analytics.to_dict(),
            "gradeReasoning": self.grade_reasoning,
            "remarks": self.remarks,
        }


@dataclass(frozen=True)
class BatchItemOutcome:
    """Per-assignment record in the batch report."""

    document_id: str
    status: BatchItemStatus
    error: Optional[str] = None

    @classmethod
    def success(cls, document_id: str) -> "BatchItemOutcome":
        return cls(document_id=document_id, status=BatchItemStatus.SUCCESS)

    @classmethod
    def failed(cls, document_id: str, error: str) -> "BatchItemOutcome":
        return cls(document_id=document_id, status=BatchItemStatus.FAILED, error=error)

    def to_dict(self) -> Dict[str, Any]:
        data = {"assignmentId": self.document_id, "status": self.status.value}
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class FetchedDocument:
    """An assignment PDF downloaded from S3."""

    file_name: str
    local_path: str
    s3_key: str


@dataclass
class ConvertedDocument:
    """A PDF successfully converted to a text file."""

    original_file: str
    text_file: str
    text_path: str
    character_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "originalFile": self.original_file,
            "textFile": self.text_file,
            "textPath": self.text_path,
            "characterCount": self.character_count,
        }


@dataclass
class ConversionSummary:
    timestamp: str
    total_files: int
    successful_conversions: int
    files: List[ConvertedDocument] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "totalFiles": self.total_files,
            "successfulConversions": self.successful_conversions,
            "files": [f.to_dict() for f in self.files],
        }


@dataclass
class TerminationResult:
    instance_id: Optional[str]
    terminated: bool
    previous_state: Optional[str] = None
    current_state: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
