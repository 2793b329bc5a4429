"""Data model for converted bill-of-quantities spreadsheets."""

from __future__ import annotations

from dataclasses import dataclass, field

from cable_ingest.models.diagnostics import ConversionDiagnostics


@dataclass(frozen=True, slots=True)
class BoqItem:
    """One priced line of a bill of quantities.

    Attributes:
        no: Item number from the sheet, or a sequential counter.
        description: Non-empty item description.
        unit: Unit of measure (``"m"``, ``"unit"``, ``"ls"``...).
        quantity: Quantity, >= 0.
        unit_price: Price per unit, >= 0.
        total_price: Explicit total column value, else quantity x unit price.
        category: Lowercased category column value, if any.
        cost_bucket: Cost partition the item counts towards
            (``"material"``, ``"labor"``, or a configured bucket).
    """

    no: int
    description: str
    unit: str
    quantity: float
    unit_price: float
    total_price: float
    category: str | None = None
    cost_bucket: str = "material"

    def __post_init__(self) -> None:
        if not self.description.strip():
            msg = "BoqItem description must not be blank"
            raise ValueError(msg)
        if self.quantity < 0 or self.unit_price < 0:
            msg = (
                f"BoqItem {self.no} has negative quantity/unit price "
                f"({self.quantity}, {self.unit_price})"
            )
            raise ValueError(msg)

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "no": self.no,
            "description": self.description,
            "unit": self.unit,
            "quantity": self.quantity,
            "unitPrice": self.unit_price,
            "totalPrice": self.total_price,
        }
        if self.category:
            data["category"] = self.category
        return data


@dataclass(frozen=True, slots=True)
class BoqSummary:
    """Aggregated cost of a BOQ.

    ``material_cost`` and ``labor_cost`` are the two default buckets of
    ``cost_by_bucket``; together with any configured extra buckets they
    partition ``total_cost``.
    """

    total_items: int
    total_cost: float
    material_cost: float
    labor_cost: float
    cost_by_bucket: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, object]:
        return {
            "totalItems": self.total_items,
            "totalCost": self.total_cost,
            "materialCost": self.material_cost,
            "laborCost": self.labor_cost,
        }


@dataclass(frozen=True, slots=True)
class BoqData:
    """A converted BOQ sheet."""

    items: tuple[BoqItem, ...]
    summary: BoqSummary
    project_name: str | None = None
    diagnostics: ConversionDiagnostics = field(
        default_factory=ConversionDiagnostics, compare=False
    )

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "items": [item.to_dict() for item in self.items],
            "summary": self.summary.to_dict(),
        }
        if self.project_name:
            data["projectName"] = self.project_name
        return data
