"""Schémas et types pour le matching."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, NamedTuple

from datamatch.normalize import parse_date, safe_str


class Confidence(str, Enum):
    """Niveau de confiance d'une correspondance."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    VERY_LOW = "Very Low"

    @property
    def rank(self) -> int:
        return _CONFIDENCE_RANK[self]


_CONFIDENCE_RANK = {
    Confidence.VERY_LOW: 0,
    Confidence.LOW: 1,
    Confidence.MEDIUM: 2,
    Confidence.HIGH: 3,
}


class MatchType(str, Enum):
    AUTO = "auto"
    MANUAL = "manual"
    SUGGESTED = "suggested"


class MatchStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


def _first(d: dict[str, Any], *keys: str) -> Any:
    """Première valeur non vide parmi plusieurs clés possibles."""
    for k in keys:
        if k in d and safe_str(d[k]).strip():
            return d[k]
    return None


def _text(d: dict[str, Any], *keys: str) -> str:
    return safe_str(_first(d, *keys)).strip()


def _number(d: dict[str, Any], *keys: str) -> float:
    val = _first(d, *keys)
    if val is None:
        return 0.0
    try:
        return float(val)
    except (TypeError, ValueError):
        return 0.0


@dataclass(frozen=True)
class ExternalRecord:
    """Opportunité issue de la liste SharePoint (lecture seule)."""

    opportunity_id: str = ""
    opportunity_name: str = ""
    customer_name: str = ""
    product_group: str = ""
    product_name: str = ""
    product_code: str = ""
    sales_code: str = ""
    entry_date: date | None = None
    register_date: date | None = None
    pipeline_stage: str = ""
    country: str = ""

    @property
    def key(self) -> str:
        return self.opportunity_id

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> ExternalRecord:
        return cls(
            opportunity_id=_text(d, "opportunity_id", "opportunityId", "id", "Id"),
            opportunity_name=_text(d, "opportunity_name", "opportunityName", "title", "Title"),
            customer_name=_text(d, "customer_name", "customerName", "CustomerName"),
            product_group=_text(d, "product_group", "productGroup", "ProductGroup"),
            product_name=_text(d, "product_name", "productName", "ProductName"),
            product_code=_text(d, "product_code", "productCode", "ProductCode"),
            sales_code=_text(
                d, "sales_code", "customerNameSalePersonCode", "CustomerNameSalePersonCode", "salesCode"
            ),
            entry_date=parse_date(_first(d, "entry_date", "s9DWINEntryDate", "S9DWINEntryDate")),
            register_date=parse_date(_first(d, "register_date", "registerDate", "RegisterDate")),
            pipeline_stage=_text(d, "pipeline_stage", "pipelineStage", "PipelineStage"),
            country=_text(d, "country", "Country"),
        )


@dataclass(frozen=True)
class InternalRecord:
    """Ligne de la table transactionnelle (lecture seule)."""

    row_key: str = ""
    cust_short_dim_name: str = ""
    cust_app_dim_name: str = ""
    prod_chip_name_dim_name: str = ""
    salesperson_dim_name: str = ""
    document_date: date | None = None
    document_no: str = ""
    item_reference_no: str = ""
    region_dim_name3: str = ""
    sell_to_cust_name: str = ""
    description: str = ""
    quantity: float = 0.0
    unit_price: float = 0.0
    line_amount: float = 0.0
    total_sales: float = 0.0

    @property
    def key(self) -> str:
        return self.row_key

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> InternalRecord:
        return cls(
            row_key=_text(d, "row_key", "rowKey", "RowKey"),
            cust_short_dim_name=_text(d, "cust_short_dim_name", "custShortDimName", "CustShortDimName"),
            cust_app_dim_name=_text(d, "cust_app_dim_name", "custAppDimName", "CustAppDimName"),
            prod_chip_name_dim_name=_text(
                d, "prod_chip_name_dim_name", "prodChipNameDimName", "ProdChipNameDimName"
            ),
            salesperson_dim_name=_text(d, "salesperson_dim_name", "salespersonDimName", "SalespersonDimName"),
            document_date=parse_date(_first(d, "document_date", "documentDate", "DocumentDate")),
            document_no=_text(d, "document_no", "documentNo"),
            item_reference_no=_text(d, "item_reference_no", "itemReferenceNo"),
            region_dim_name3=_text(d, "region_dim_name3", "regionDimName3", "RegionDimName3"),
            sell_to_cust_name=_text(d, "sell_to_cust_name", "selltoCustName_SalesHeader"),
            description=_text(d, "description"),
            quantity=_number(d, "quantity"),
            unit_price=_number(d, "unit_price", "unitPrice"),
            line_amount=_number(d, "line_amount", "lineAmount"),
            total_sales=_number(d, "total_sales", "totalSales"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


class Comparison(NamedTuple):
    """Résultat d'un comparateur de champ : score 0-100 et catégorie."""

    score: float
    bucket: str


@dataclass
class FieldScore:
    """Score d'un champ pour une paire d'enregistrements."""

    field: str
    left: str
    right: str
    score: float
    bucket: str


@dataclass
class MatchCandidate:
    """Un candidat de correspondance pour un enregistrement externe."""

    external: ExternalRecord
    internal: InternalRecord
    score: float
    details: dict[str, float] = field(default_factory=dict)  # score par champ

    def __repr__(self) -> str:
        return f"MatchCandidate(internal={self.internal.key!r}, score={self.score:.1f})"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class MatchResult:
    """Correspondance retenue, prête à être persistée."""

    external: ExternalRecord
    internal: InternalRecord
    score: float
    confidence: Confidence
    match_type: MatchType = MatchType.AUTO
    status: MatchStatus = MatchStatus.PENDING
    created_at: datetime = field(default_factory=_utcnow)
    matched_by: str = ""
    details: dict[str, float] = field(default_factory=dict)  # score par champ
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class Suggestion:
    """Suggestion de rapprochement entre deux enregistrements internes."""

    target: InternalRecord
    score: float
    confidence: Confidence
    reasons: list[str] = field(default_factory=list)
