"""Invoice type classification from the extracted services text.

Rules are evaluated top to bottom and the first match wins. Several rules
exclude terms an earlier rule already claimed, so the order is part of the
behaviour: professional services are checked before managed services and
maintenance, and ad hoc licences before subscriptions.
"""

from __future__ import annotations

from collections.abc import Callable

from app.core.enums import InvoiceType

Rule = tuple[Callable[[str], bool], InvoiceType]


def _has_any(text: str, *terms: str) -> bool:
    return any(term in text for term in terms)


def _is_credit(text: str) -> bool:
    return _has_any(text, "credit", "negative")


def _is_professional_services(text: str) -> bool:
    return _has_any(
        text,
        "consulting",
        "professional services",
        "professional service",
        "professionalservicesfee",
        "penetration testing",
    )


def _is_managed_services(text: str) -> bool:
    return (
        _has_any(text, "managed services", "managedservices", "managed/outsourcing services")
        or ("managed" in text and "outsourcing" in text)
        or ("subscription" in text and "managed" in text)
    )


def _is_maintenance(text: str) -> bool:
    return (
        _has_any(text, "maintenance", "software support services", "support services", "support fee")
        and not _has_any(text, "managed", "professional", "subscription")
    )


def _is_adhoc_licence(text: str) -> bool:
    return _has_any(text, "license", "licence") and not _has_any(
        text, "subscription", "annual", "yearly", "recurring"
    )


def _is_subscription(text: str) -> bool:
    return (
        "subscription" in text
        or (_has_any(text, "license", "licence") and _has_any(text, "annual", "yearly"))
        or "saas" in text
    )


def _is_hosting(text: str) -> bool:
    return _has_any(text, "hosting", "cloud services", "infrastructure")


def _is_software(text: str) -> bool:
    return _has_any(text, "software", "application", "program")


def _is_hardware(text: str) -> bool:
    return _has_any(text, "hardware", "equipment", "devices")


def _is_third_party(text: str) -> bool:
    return "third party" in text


TEXT_RULES: tuple[Rule, ...] = (
    (_is_credit, InvoiceType.CREDIT_MEMO),
    (_is_professional_services, InvoiceType.PS),
    (_is_managed_services, InvoiceType.MS),
    (_is_maintenance, InvoiceType.MAINT),
    (_is_adhoc_licence, InvoiceType.SW),
    (_is_subscription, InvoiceType.SUB),
    (_is_hosting, InvoiceType.HOSTING),
    (_is_software, InvoiceType.SW),
    (_is_hardware, InvoiceType.HW),
    (_is_third_party, InvoiceType.THIRD_PARTY),
)

DEFAULT_TYPE = InvoiceType.PS


def classify_invoice_type(
    services: str | None,
    invoice_number: str | None = None,
    amount: float | None = None,
) -> InvoiceType:
    """Map services text (and amount sign) to an invoice type code."""
    if amount is not None and amount < 0:
        return InvoiceType.CREDIT_MEMO
    if not services:
        return DEFAULT_TYPE

    lowered = services.lower()
    for predicate, result in TEXT_RULES:
        if predicate(lowered):
            return result
    return DEFAULT_TYPE
