from __future__ import annotations
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, List, Optional


class StepStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETE = "complete"
    ERROR = "error"


class ArtifactType(str, Enum):
    TEXT = "text"
    IMAGE = "image"


CHECK_CACHE = "Checking Cache"
VALIDATE_URL = "Validating URL"
DOWNLOAD_ARTICLE = "Downloading Article Content"
GENERATE_SUMMARY = "Generating Summary"
FINALIZE = "Finalizing Comic"

CACHE_HIT_DETAIL = "Retrieved from cache"


def image_step_name(part_number: int) -> str:
    return f"Generating Image for Part {part_number}"


@dataclass
class StepArtifact:
    type: ArtifactType
    data: str


@dataclass
class Step:
    name: str
    status: StepStatus = StepStatus.PENDING
    detail: Optional[str] = None
    artifact: Optional[StepArtifact] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        if self.artifact is not None:
            data["artifact"] = {"type": self.artifact.type.value, "data": self.artifact.data}
        return data

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Step":
        artifact = data.get("artifact")
        return Step(
            name=data["name"],
            status=StepStatus(data.get("status", StepStatus.PENDING.value)),
            detail=data.get("detail"),
            artifact=StepArtifact(ArtifactType(artifact["type"]), artifact["data"]) if artifact else None,
        )


def build_initial_steps(part_count: int) -> List[Step]:
    """Canonical step sequence for a comic of ``part_count`` panels."""
    names = [CHECK_CACHE, VALIDATE_URL, DOWNLOAD_ARTICLE, GENERATE_SUMMARY]
    names += [image_step_name(i + 1) for i in range(part_count)]
    names.append(FINALIZE)
    return [Step(name=name) for name in names]


def steps_from_json(raw: Optional[List[Dict[str, Any]]]) -> List[Step]:
    return [Step.from_dict(item) for item in (raw or [])]


def steps_to_json(steps: List[Step]) -> List[Dict[str, Any]]:
    return [s.to_dict() for s in steps]


def all_complete(steps: List[Step]) -> bool:
    return bool(steps) and all(s.status == StepStatus.COMPLETE for s in steps)


def job_status(steps: List[Step]) -> StepStatus:
    """Collapse a step list into one overall status."""
    if any(s.status == StepStatus.ERROR for s in steps):
        return StepStatus.ERROR
    if all_complete(steps):
        return StepStatus.COMPLETE
    if any(s.status in (StepStatus.IN_PROGRESS, StepStatus.COMPLETE) for s in steps):
        return StepStatus.IN_PROGRESS
    return StepStatus.PENDING


def served_from_cache(steps: List[Step]) -> bool:
    return all_complete(steps) and steps[0].detail == CACHE_HIT_DETAIL
