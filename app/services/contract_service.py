"""Contract service: contract values keyed by name and invoicing progress against them."""

from __future__ import annotations

from typing import Any

from app.core.enums import Currency, InvoiceStatus, InvoiceType
from app.core.exceptions import NotFoundError, ValidationError
from app.models.contract import Contract
from app.models.invoice import Invoice
from app.services.base_service import BaseService
from app.services.exchange_rates import convert_to_usd
from app.utils.validators import normalize_key, sanitize_text

SUPPORTED_CURRENCIES = {item.value for item in Currency}


def _capped_percentage(part: float, whole: float) -> int:
    if whole <= 0:
        return 0
    return min(100, round(part / whole * 100))


class ContractService(BaseService):
    """Service for contract CRUD keyed by the contract name printed on invoices."""

    def _clean_inputs(self, contract_name: str | None, contract_value: Any, currency: str | None) -> tuple[str, float, str]:
        name = sanitize_text(contract_name, max_len=128)
        if not name:
            raise ValidationError("Contract name and value are required")
        try:
            value = float(contract_value)
        except (TypeError, ValueError) as exc:
            raise ValidationError("Contract name and value are required") from exc
        if value <= 0:
            raise ValidationError("Contract value must be positive")
        code = (currency or Currency.USD.value).strip().upper()
        if code not in SUPPORTED_CURRENCIES:
            raise ValidationError(f"Unsupported currency {code!r}")
        return name, value, code

    def list_contracts(self) -> list[Contract]:
        return self.db.query(Contract).order_by(Contract.contract_name.asc()).all()

    def find_by_name(self, contract_name: str | None) -> Contract | None:
        key = normalize_key(contract_name)
        if not key:
            return None
        return next((row for row in self.list_contracts() if normalize_key(row.contract_name) == key), None)

    def upsert_contract(
        self,
        contract_name: str | None,
        contract_value: Any,
        currency: str | None = None,
    ) -> tuple[Contract, str]:
        """Create or update by name; returns the row and ``"created"`` or ``"updated"``."""
        name, value, code = self._clean_inputs(contract_name, contract_value, currency)
        contract = self.find_by_name(name)
        action = "updated"
        if contract is None:
            contract = Contract(contract_name=name, contract_value=value, currency=code)
            self.db.add(contract)
            action = "created"
        else:
            contract.contract_value = value
            contract.currency = code
        self.commit()
        self.db.refresh(contract)
        return contract, action

    def update_contract(self, contract_name: str, contract_value: Any, currency: str | None = None) -> Contract:
        contract, _ = self.upsert_contract(contract_name, contract_value, currency)
        return contract

    def delete_contract(self, contract_name: str) -> None:
        contract = self.find_by_name(contract_name)
        if contract is None:
            raise NotFoundError(f"Contract {contract_name} not found")
        self.db.delete(contract)
        self.commit()

    def contract_progress(self, rates: dict[str, float] | None = None) -> list[dict[str, Any]]:
        """Invoiced and paid totals per contract, in USD.

        Credit memos are left out of both totals. Percentages are rounded and
        capped at 100.
        """
        invoices_by_contract: dict[str, list[Invoice]] = {}
        for invoice in self.db.query(Invoice).filter(Invoice.invoice_type != InvoiceType.CREDIT_MEMO.value):
            key = normalize_key(invoice.customer_contract)
            if key:
                invoices_by_contract.setdefault(key, []).append(invoice)

        progress: list[dict[str, Any]] = []
        for contract in self.list_contracts():
            matched = invoices_by_contract.get(normalize_key(contract.contract_name), [])
            value_usd = convert_to_usd(contract.contract_value, contract.currency, rates)
            invoiced_usd = sum(convert_to_usd(inv.amount_due, inv.currency, rates) for inv in matched)
            paid_usd = sum(
                convert_to_usd(inv.amount_due, inv.currency, rates)
                for inv in matched
                if inv.status == InvoiceStatus.PAID.value
            )
            progress.append(
                {
                    "contract_name": contract.contract_name,
                    "contract_value": contract.contract_value,
                    "currency": contract.currency,
                    "contract_value_usd": round(value_usd, 2),
                    "invoiced_usd": round(invoiced_usd, 2),
                    "paid_usd": round(paid_usd, 2),
                    "remaining_usd": round(value_usd - invoiced_usd, 2),
                    "invoiced_percentage": _capped_percentage(invoiced_usd, value_usd),
                    "paid_percentage": _capped_percentage(paid_usd, value_usd),
                    "invoice_count": len(matched),
                }
            )
        return progress
