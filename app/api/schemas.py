"""Request body models for write endpoints."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from app.ledger import TransactionDraft


class ProjectCreateBody(BaseModel):
    """Body of `POST /projects`."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    description: str | None = None


class PeriodNameBody(BaseModel):
    """Body of `POST /periods/{period_id}/name`."""

    model_config = ConfigDict(extra="forbid")

    name: str


class TransactionBody(BaseModel):
    """Body of transaction create and replace requests.

    Field semantics (type-specific partner rules, amount precision) are
    validated by the ledger layer so every caller gets the same errors.
    """

    model_config = ConfigDict(extra="forbid")

    transaction_type: str
    transaction_date: date
    description: str
    amount: Decimal
    paid_by: str | None = None
    from_partner: str | None = None
    to_partner: str | None = None

    def api_to_draft(self) -> TransactionDraft:
        """Convert the body to a ledger transaction draft."""

        return TransactionDraft(
            transaction_type=self.transaction_type,
            transaction_date=self.transaction_date,
            description=self.description,
            amount=self.amount,
            paid_by=self.paid_by,
            from_partner=self.from_partner,
            to_partner=self.to_partner,
        )


class NotificationStatusBody(BaseModel):
    """Body of `PATCH /notifications/{notification_id}/status`."""

    model_config = ConfigDict(extra="forbid")

    status: str
    last_error: str | None = None
