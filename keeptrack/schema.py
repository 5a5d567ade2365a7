"""
Project schema for the KeepTrack board.

Columns (one per status, board order):
  Backlog → To Do → In Progress → Review → Done → Blocked

A Project is normalized from whatever the API or cache hands us
(camelCase or the server's snake_case names) with defaults applied.
"""
from enum import Enum
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional, List, Dict, Any

from .errors import ValidationError


class ProjectStatus(Enum):
    """The six board columns."""
    BACKLOG = "backlog"
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    REVIEW = "review"
    DONE = "done"
    BLOCKED = "blocked"

    @classmethod
    def values(cls) -> List[str]:
        return [s.value for s in cls]


# Column titles in board order
COLUMNS = [
    ("Backlog", ProjectStatus.BACKLOG.value),
    ("To Do", ProjectStatus.TODO.value),
    ("In Progress", ProjectStatus.IN_PROGRESS.value),
    ("Review", ProjectStatus.REVIEW.value),
    ("Done", ProjectStatus.DONE.value),
    ("Blocked", ProjectStatus.BLOCKED.value),
]


def is_valid_status(value: Any) -> bool:
    """True if value is one of the six known status strings."""
    return isinstance(value, str) and value in ProjectStatus.values()


# wire name → attribute name (server columns are snake_case)
_ALIASES = {
    "imageUrl": "image_url",
    "image_url": "image_url",
    "isActive": "is_active",
    "is_active": "is_active",
    "contractSignedOn": "contract_signed_on",
    "contract_signed_on": "contract_signed_on",
}


def _parse_date(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _parse_budget(value: Any) -> float:
    if value is None or value == "":
        return 0
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0


def _parse_bool(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() not in ("false", "0", "no", "off", "")
    return bool(value)


@dataclass
class Project:
    """A unit of work tracked on the board."""

    id: Optional[int] = None        # server-assigned
    name: str = ""
    description: str = ""
    image_url: Optional[str] = None
    budget: float = 0
    status: str = ProjectStatus.BACKLOG.value
    order: int = 0                  # position within the status column
    is_active: bool = True
    contract_signed_on: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]] = None) -> "Project":
        """Normalize a partial initializer. Never raises for missing fields."""
        data = dict(data or {})
        for wire, attr in _ALIASES.items():
            if wire in data and wire != attr:
                data.setdefault(attr, data.pop(wire))

        raw_id = data.get("id")
        try:
            project_id = int(raw_id) if raw_id is not None else None
        except (TypeError, ValueError):
            project_id = None

        status = data.get("status")
        raw_order = data.get("order")
        try:
            order = int(raw_order) if raw_order is not None else 0
        except (TypeError, ValueError):
            order = 0

        return cls(
            id=project_id,
            name=data.get("name") or "",
            description=data.get("description") or "",
            image_url=data.get("image_url"),
            budget=_parse_budget(data.get("budget")),
            # unknown values are kept so the gateway can reject them
            status=status if status else ProjectStatus.BACKLOG.value,
            order=order,
            is_active=_parse_bool(data.get("is_active")),
            contract_signed_on=_parse_date(data.get("contract_signed_on")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the camelCase wire shape, dates as ISO text."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "imageUrl": self.image_url,
            "budget": self.budget,
            "status": self.status,
            "order": self.order,
            "isActive": self.is_active,
            "contractSignedOn": (
                self.contract_signed_on.isoformat() if self.contract_signed_on else None
            ),
        }

    @property
    def is_new(self) -> bool:
        return self.id is None

    def require_id(self) -> int:
        if self.id is None:
            raise ValidationError("Project has no id; it must be created before it can be updated.")
        return self.id

    def validate(self) -> None:
        """Raise ValidationError if the status must not be sent to the API."""
        if not is_valid_status(self.status):
            raise ValidationError(
                f'Invalid status value: "{self.status}". '
                f"Valid values are: {', '.join(ProjectStatus.values())}."
            )

    def validate_form(self) -> None:
        """Stricter check for user edits: status plus name and budget."""
        self.validate()
        if not self.name or not self.name.strip():
            raise ValidationError("Project name is required.")
        if self.budget < 0:
            raise ValidationError("Project budget cannot be negative.")


def create_optimistic_update(project: Project, **updates) -> Project:
    """Return a copy of project with updates applied; the original is untouched."""
    if "id" in updates and updates["id"] != project.id:
        raise ValidationError("Project id is immutable.")
    return replace(project, **updates)
