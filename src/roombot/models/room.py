from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List


@dataclass
class Room:
    """Meeting room model."""

    id: str
    name: str
    capacity: int
    location: str = ""
    equipment: List[str] = field(default_factory=list)

    STATUS_ACTIVE: ClassVar[str] = "active"
    STATUS_INACTIVE: ClassVar[str] = "inactive"

    status: str = field(default=STATUS_ACTIVE)

    def is_active(self) -> bool:
        return self.status == self.STATUS_ACTIVE

    def can_accommodate(self, participants: int) -> bool:
        return participants <= self.capacity

    def to_dict(self) -> Dict[str, Any]:
        data = self.__dict__.copy()
        data["equipment"] = list(self.equipment)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Room:
        data = data.copy()
        equipment = data.get("equipment")
        if isinstance(equipment, str):
            data["equipment"] = [item.strip() for item in equipment.split(",") if item.strip()]
        elif equipment is None:
            data["equipment"] = []

        field_names = {f.name for f in cls.__dataclass_fields__.values()}
        filtered_data = {k: v for k, v in data.items() if k in field_names}

        return cls(**filtered_data)
