import uuid
from dataclasses import asdict, dataclass, field
from typing import Any


def new_inclusion_id() -> str:
    return uuid.uuid4().hex[:8]


@dataclass
class Inclusion:
    """A diamond or stone row. Values stay as typed so half-finished input survives reruns."""

    id: str = field(default_factory=new_inclusion_id)
    weight: str = ""
    pieces: str = ""
    rate: str = ""

    def to_dict(self) -> dict[str, str]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Inclusion":
        return cls(
            id=str(payload.get("id") or new_inclusion_id()),
            weight="" if payload.get("weight") is None else str(payload["weight"]),
            pieces="" if payload.get("pieces") is None else str(payload["pieces"]),
            rate="" if payload.get("rate") is None else str(payload["rate"]),
        )


@dataclass
class Profile:
    name: str
    phone_number: str
    theme: str
    onboarding_completed: bool

