"""Section registry: one descriptor per managed record category.

Descriptors are plain data. Forms and other per-category behaviour are
registered separately (see ``grantdesk.forms``), keyed by ``SectionId``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple, Union


class SectionId(str, Enum):
    # Values are also the path segment of the category's collection.
    FUNDING_OPPORTUNITY = "funding_opportunity"
    APPLICATION = "application"
    BUDGET = "budget"
    BUDGET_CODE = "budget_code"
    GRANT = "grant"
    SUBGRANTEE_AWARD = "subgrantee_award"
    CONTRACT = "contract"
    INVOICE = "invoice"
    COMPLIANCE = "compliance"


@dataclass(frozen=True)
class SectionDescriptor:
    id: SectionId
    title: str
    description: str
    display_fields: Tuple[str, ...]
    nav_label: str
    item_label: str


_REGISTRY: Dict[SectionId, SectionDescriptor] = {
    d.id: d
    for d in (
        SectionDescriptor(
            id=SectionId.FUNDING_OPPORTUNITY,
            title="Funding Opportunities",
            description="Manage funding opportunities and grant announcements",
            display_fields=("fundingOpportunityTitle", "fundingAgency", "applicationDeadline"),
            nav_label="Funding",
            item_label="Funding Opportunity",
        ),
        SectionDescriptor(
            id=SectionId.APPLICATION,
            title="Applications",
            description="Track grant applications and proposals",
            display_fields=("programArea", "estimatedTotalBudget", "reviewers"),
            nav_label="Application",
            item_label="Application",
        ),
        SectionDescriptor(
            id=SectionId.BUDGET,
            title="Budget",
            description="Manage budget codes and financial tracking",
            display_fields=("magicBudgetCodes", "functionalArea", "costCenter"),
            nav_label="Budget",
            item_label="Budget",
        ),
        SectionDescriptor(
            id=SectionId.BUDGET_CODE,
            title="Budget Codes",
            description="Manage individual budget line items",
            display_fields=("projectName", "bli", "requestedAmount", "approvedAmount"),
            nav_label="Budget Codes",
            item_label="Budget Code",
        ),
        SectionDescriptor(
            id=SectionId.GRANT,
            title="Grants",
            description="Active grants and awards management",
            display_fields=("approvedAwardAmount", "periodOfPerformanceStartDate", "grantAnalystPOC"),
            nav_label="Grant",
            item_label="Grant",
        ),
        SectionDescriptor(
            id=SectionId.SUBGRANTEE_AWARD,
            title="Sub Grantee Awards",
            description="Manage subrecipient awards and monitoring",
            display_fields=("subrecipientName", "awardAmount", "reportingFrequency"),
            nav_label="Sub Awards",
            item_label="Sub Grantee Award",
        ),
        SectionDescriptor(
            id=SectionId.CONTRACT,
            title="Contracts",
            description="Procurement and contract management",
            display_fields=("vendorName", "contractValue", "contractExecutionDate"),
            nav_label="Contract",
            item_label="Contract",
        ),
        SectionDescriptor(
            id=SectionId.INVOICE,
            title="Invoices",
            description="Invoice processing and payment tracking",
            display_fields=("vendor", "amountRequested", "invoiceDate"),
            nav_label="Invoice",
            item_label="Invoice",
        ),
        SectionDescriptor(
            id=SectionId.COMPLIANCE,
            title="Compliance",
            description="Compliance tracking and closeout",
            display_fields=("name", "dateCompleted", "deliverablesCompleted"),
            nav_label="Compliance",
            item_label="Compliance Item",
        ),
    )
}

_ORDER: Tuple[SectionId, ...] = tuple(SectionId)


def describe(section_id: Union[SectionId, str]) -> SectionDescriptor:
    """Return the descriptor for ``section_id``.

    Raises KeyError for anything outside the nine known categories.
    """
    try:
        key = SectionId(section_id)
    except ValueError:
        raise KeyError(f"Unknown section: {section_id!r}") from None
    return _REGISTRY[key]


def all_section_ids() -> Tuple[SectionId, ...]:
    return _ORDER


def all_sections() -> Tuple[SectionDescriptor, ...]:
    return tuple(_REGISTRY[s] for s in _ORDER)
