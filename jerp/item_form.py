"""
Working copy of the item entry form.

The Streamlit editor keeps one `ItemForm` per open editor in session state and
routes every widget change through it. Net weight and fine are derived fields:
they are only ever written by the recalculation helpers below.

Recalculation rules:

* gross weight edit -> net weight from gross and inclusions, then fine from the
  new net weight and the current percentage
* percentage edit -> fine from the current net weight (net weight untouched)
* diamond/stone added, removed, or its weight/pieces edited -> net weight, then fine
* anything else (name, date, carate, making, rate, description, client, image)
  leaves the derived fields alone
"""

from dataclasses import dataclass, field
from typing import Any, Literal

from jerp.models import Inclusion
from jerp.valuation import compute_fine, compute_net_weight, normalize_decimal_input

InclusionKind = Literal["diamonds", "stones"]

INCLUSION_KINDS: tuple[InclusionKind, ...] = ("diamonds", "stones")
DERIVED_FIELDS = ("net_weight", "fine")
NUMERIC_FIELDS = ("gross_weight", "percentage", "making")
TEXT_FIELDS = ("name", "date", "carate", "description")
INCLUSION_FIELDS = ("weight", "pieces", "rate")
WEIGHT_BEARING_FIELDS = ("weight", "pieces")


def _stored_number(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _stored_fixed(value: Any, places: int) -> str:
    if value is None:
        return ""
    try:
        return f"{float(value):.{places}f}"
    except (TypeError, ValueError):
        return str(value)


@dataclass
class ItemForm:
    name: str = ""
    date: str = ""
    gross_weight: str = ""
    carate: str = ""
    diamonds: list[Inclusion] = field(default_factory=list)
    stones: list[Inclusion] = field(default_factory=list)
    net_weight: str = ""
    percentage: str = ""
    making: str = ""
    fine: str = ""
    description: str = ""
    client_id: int | None = None
    image_name: str | None = None
    image_mime: str | None = None
    image_data: bytes | None = None

    @classmethod
    def from_record(cls, row: Any) -> "ItemForm":
        """Builds a form pre-filled from a stored item (a `sqlite3.Row` or dict)."""
        record = dict(row)
        return cls(
            name=record.get("name") or "",
            date=record.get("date") or "",
            gross_weight=_stored_number(record.get("gross_weight")),
            carate=record.get("carate") or "",
            diamonds=[Inclusion.from_dict(entry) for entry in record.get("diamonds") or []],
            stones=[Inclusion.from_dict(entry) for entry in record.get("stones") or []],
            net_weight=_stored_fixed(record.get("net_weight"), 3),
            percentage=_stored_number(record.get("percentage")),
            making=_stored_number(record.get("making")),
            fine=_stored_fixed(record.get("fine"), 2),
            description=record.get("description") or "",
            client_id=record.get("client_id"),
            image_name=record.get("image_name"),
            image_mime=record.get("image_mime"),
            image_data=record.get("image_data"),
        )

    def set_field(self, field_name: str, value: str) -> None:
        if field_name in DERIVED_FIELDS:
            raise ValueError(f"{field_name} is calculated and cannot be edited directly")
        if field_name in NUMERIC_FIELDS:
            value = normalize_decimal_input(value)
        elif field_name not in TEXT_FIELDS:
            raise ValueError(f"Unknown item field: {field_name}")

        setattr(self, field_name, value)

        if field_name == "gross_weight":
            self._recalculate_net_weight()
        elif field_name == "percentage":
            self._recalculate_fine()

    def set_client(self, client_id: int | None) -> None:
        self.client_id = client_id

    def set_image(self, name: str, mime: str, data: bytes) -> None:
        self.image_name = name
        self.image_mime = mime
        self.image_data = data

    def clear_image(self) -> None:
        self.image_name = None
        self.image_mime = None
        self.image_data = None

    def inclusions(self, kind: InclusionKind) -> list[Inclusion]:
        if kind == "diamonds":
            return self.diamonds
        if kind == "stones":
            return self.stones
        raise ValueError(f"Unknown inclusion kind: {kind}")

    def add_inclusion(self, kind: InclusionKind) -> Inclusion:
        inclusion = Inclusion()
        self.inclusions(kind).append(inclusion)
        self._recalculate_net_weight()
        return inclusion

    def remove_inclusion(self, kind: InclusionKind, inclusion_id: str) -> None:
        rows = self.inclusions(kind)
        rows[:] = [row for row in rows if row.id != inclusion_id]
        self._recalculate_net_weight()

    def update_inclusion(self, kind: InclusionKind, inclusion_id: str, field_name: str, value: str) -> None:
        if field_name not in INCLUSION_FIELDS:
            raise ValueError(f"Unknown inclusion field: {field_name}")

        normalized = normalize_decimal_input(value)
        for row in self.inclusions(kind):
            if row.id == inclusion_id:
                setattr(row, field_name, normalized)

        if field_name in WEIGHT_BEARING_FIELDS:
            self._recalculate_net_weight()

    def _recalculate_net_weight(self) -> None:
        self.net_weight = compute_net_weight(self.gross_weight, self.diamonds, self.stones)
        self._recalculate_fine()

    def _recalculate_fine(self) -> None:
        self.fine = compute_fine(self.net_weight, self.percentage)

    def to_payload(self) -> dict[str, Any]:
        """Snapshot handed to validation and persistence on submit."""
        return {
            "name": self.name,
            "date": self.date,
            "gross_weight": self.gross_weight,
            "carate": self.carate,
            "diamonds": [row.to_dict() for row in self.diamonds],
            "stones": [row.to_dict() for row in self.stones],
            "net_weight": self.net_weight,
            "percentage": self.percentage,
            "making": self.making,
            "fine": self.fine,
            "description": self.description,
            "client_id": self.client_id,
            "image_name": self.image_name,
            "image_mime": self.image_mime,
            "image_data": self.image_data,
        }
