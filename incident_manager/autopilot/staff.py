"""Staff roster and specialization matching."""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from .models import StaffMember

AI_ASSISTANT = "AI Assistant"

DEFAULT_STAFF: Sequence[StaffMember] = (
    StaffMember(id="1", name="Anna", specialization="Database & Backend"),
    StaffMember(id="2", name="Johan", specialization="API & Performance"),
    StaffMember(id="3", name="Lisa", specialization="Cache & Infrastructure"),
    StaffMember(
        id="4",
        name=AI_ASSISTANT,
        specialization="General troubleshooting & unknown issues",
    ),
)


class StaffDirectory:
    """Read-mostly view over the staff roster."""

    def __init__(self, members: Iterable[StaffMember] | None = None) -> None:
        self._members: List[StaffMember] = list(DEFAULT_STAFF if members is None else members)

    def __bool__(self) -> bool:
        return bool(self._members)

    def __iter__(self):
        return iter(self._members)

    def __len__(self) -> int:
        return len(self._members)

    def names(self) -> List[str]:
        return [member.name for member in self._members]

    def get(self, name: str | None) -> Optional[StaffMember]:
        if not name:
            return None
        for member in self._members:
            if member.name == name:
                return member
        return None

    def match(self, keywords: Iterable[str]) -> Optional[StaffMember]:
        """Return the first human member whose specialization mentions a keyword."""

        lowered = [keyword.lower() for keyword in keywords if keyword]
        for keyword in lowered:
            for member in self._members:
                if member.name == AI_ASSISTANT:
                    continue
                if keyword in member.specialization.lower():
                    return member
        return None

    def roster_lines(self) -> List[str]:
        return [f"- {member.name}: {member.specialization}" for member in self._members]
