"""Hike domain events."""
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass
class HikeAssignmentChanged:
    """Fired after a hike's assigned guide has been written."""

    hike_id: str
    previous_guide_id: Optional[str]
    new_guide_id: Optional[str]
    changed_at: datetime

    @property
    def should_notify(self) -> bool:
        # Un-assignment and no-op writes are not notified
        return self.new_guide_id is not None and self.new_guide_id != self.previous_guide_id

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "HikeAssignmentChanged":
        changed_at = payload.get("changed_at")
        if isinstance(changed_at, str):
            changed_at = datetime.fromisoformat(changed_at)
        return cls(
            hike_id=payload["hike_id"],
            previous_guide_id=payload.get("previous_guide_id"),
            new_guide_id=payload.get("new_guide_id"),
            changed_at=changed_at,
        )
