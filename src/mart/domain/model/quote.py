"""Quote aggregate: a priced, stateful offer from a seller to a buyer.

The Quote owns its line items and governs its own lifecycle:

    DRAFT -> SENT -> ACCEPTED | REJECTED | EXPIRED
    DRAFT -> EXPIRED            (only once valid_until has passed)

ACCEPTED, REJECTED and EXPIRED are terminal. Line items can only change
while the quote is a DRAFT, and every change recomputes the totals.
"""

from __future__ import annotations

import random
import uuid
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum

from mart.domain.exceptions import (
    InvalidTransition,
    QuoteNotEditable,
    ValidationError,
)
from mart.domain.model.product import Product, Variant
from mart.domain.model.value_objects import Money, Quantity
from mart.domain.service.moq_guard import require_minimum
from mart.domain.service.price_resolver import resolve_unit_price


class QuoteStatus(Enum):
    DRAFT = "DRAFT"
    SENT = "SENT"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"

    @property
    def is_terminal(self) -> bool:
        return not ALLOWED_TRANSITIONS[self]


ALLOWED_TRANSITIONS: dict[QuoteStatus, frozenset[QuoteStatus]] = {
    QuoteStatus.DRAFT: frozenset({QuoteStatus.SENT, QuoteStatus.EXPIRED}),
    QuoteStatus.SENT: frozenset(
        {QuoteStatus.ACCEPTED, QuoteStatus.REJECTED, QuoteStatus.EXPIRED}
    ),
    QuoteStatus.ACCEPTED: frozenset(),
    QuoteStatus.REJECTED: frozenset(),
    QuoteStatus.EXPIRED: frozenset(),
}


def generate_quote_number(year: int, rng: random.Random | None = None) -> str:
    """Quote numbers look like ``QT-2024-0042``."""
    rng = rng or random.Random()
    return f"QT-{year}-{rng.randint(0, 9999):04d}"


@dataclass
class QuoteLineItem:
    """One product/variant/quantity entry of a quote.

    ``quoted_price`` is the unit price captured when the item was added.
    Later tier changes never alter it.
    """

    id: str
    product_id: str
    variant_id: str
    product_name: str
    variant_label: str
    quantity: Quantity
    quoted_price: Money  # locked at add-time
    minimum_order_quantity: int = 1

    @property
    def total_price(self) -> Money:
        return self.quoted_price * self.quantity.value


@dataclass
class Quote:
    """Aggregate root for quotations.

    Use ``Quote.create()`` for new quotes. Totals are never passed in:
    they are derived from the line items on construction and after every
    mutation.
    """

    id: str | None
    quote_number: str
    buyer_id: str
    seller_id: str
    valid_until: date
    tax_rate: Decimal
    items: list[QuoteLineItem] = field(default_factory=list)
    status: QuoteStatus = QuoteStatus.DRAFT
    notes: str | None = None
    currency: str = "USD"
    subtotal: Money = field(init=False)
    tax_amount: Money = field(init=False)
    total_amount: Money = field(init=False)

    def __post_init__(self) -> None:
        self._recompute()

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def create(
        buyer_id: str,
        seller_id: str,
        valid_until: date,
        tax_rate: Decimal,
        today: date,
        quote_number: str | None = None,
        notes: str | None = None,
        currency: str = "USD",
    ) -> Quote:
        """Create a new DRAFT quote with no line items."""
        if not buyer_id or not str(buyer_id).strip():
            raise ValidationError("Buyer is required")
        if not seller_id or not str(seller_id).strip():
            raise ValidationError("Seller is required")
        if valid_until < today:
            raise ValidationError(
                f"Valid-until date {valid_until.isoformat()} is in the past"
            )
        if tax_rate < Decimal("0"):
            raise ValidationError("Tax rate cannot be negative")

        return Quote(
            id=None,
            quote_number=quote_number or generate_quote_number(today.year),
            buyer_id=str(buyer_id).strip(),
            seller_id=str(seller_id).strip(),
            valid_until=valid_until,
            tax_rate=tax_rate,
            notes=notes,
            currency=currency,
        )

    # --- Line items -----------------------------------------------------------

    def add_item(
        self,
        product: Product,
        variant: Variant,
        quantity: int,
        line_id: str | None = None,
    ) -> QuoteLineItem:
        """Add a line priced at today's tiers for *quantity*.

        Raises BelowMinimumOrder or PriceUnavailable before touching the
        quote, so a rejected add leaves it unchanged.
        """
        self._assert_editable()
        if not variant.available or not product.available:
            raise ValidationError(f"'{product.name} / {variant.label}' is not available")

        require_minimum(quantity, product.minimum_order_quantity)
        unit_price = resolve_unit_price(variant, product, quantity)
        if unit_price.currency != self.currency:
            raise ValidationError(
                f"Cannot quote {unit_price.currency} prices on a {self.currency} quote"
            )

        item = QuoteLineItem(
            id=line_id or uuid.uuid4().hex,
            product_id=str(product.id),
            variant_id=str(variant.id),
            product_name=product.name,
            variant_label=variant.label,
            quantity=Quantity(quantity),
            quoted_price=unit_price,  # <-- price snapshot
            minimum_order_quantity=product.minimum_order_quantity,
        )
        self.items.append(item)
        self._recompute()
        return item

    def remove_item(self, line_id: str) -> QuoteLineItem:
        self._assert_editable()
        item = self._find_item(line_id)
        self.items.remove(item)
        self._recompute()
        return item

    def change_quantity(self, line_id: str, quantity: int) -> QuoteLineItem:
        """Change a line's quantity, keeping its snapshot unit price."""
        self._assert_editable()
        item = self._find_item(line_id)
        require_minimum(quantity, item.minimum_order_quantity)
        item.quantity = Quantity(quantity)
        self._recompute()
        return item

    # --- State transitions ----------------------------------------------------

    def send(self) -> None:
        """Transition DRAFT -> SENT."""
        if self.status == QuoteStatus.DRAFT and not self.items:
            raise ValidationError("Cannot send a quote without line items")
        self._transition(QuoteStatus.SENT)

    def accept(self, today: date | None = None) -> None:
        """Transition SENT -> ACCEPTED; refused once the quote has lapsed."""
        if today is not None and self.status == QuoteStatus.SENT and self.is_lapsed(today):
            raise InvalidTransition(
                f"Quote {self.quote_number} lapsed on {self.valid_until.isoformat()}"
            )
        self._transition(QuoteStatus.ACCEPTED)

    def reject(self) -> None:
        """Transition SENT -> REJECTED."""
        self._transition(QuoteStatus.REJECTED)

    def expire(self, today: date) -> None:
        """Transition DRAFT|SENT -> EXPIRED once valid_until has passed."""
        if self.status in (QuoteStatus.DRAFT, QuoteStatus.SENT) and not self.is_lapsed(today):
            raise InvalidTransition(
                f"Quote {self.quote_number} is valid until {self.valid_until.isoformat()}"
            )
        self._transition(QuoteStatus.EXPIRED)

    def refresh_expiry(self, today: date) -> bool:
        """Expire the quote if it has lapsed. Returns True if it changed."""
        if self.status in (QuoteStatus.DRAFT, QuoteStatus.SENT) and self.is_lapsed(today):
            self._transition(QuoteStatus.EXPIRED)
            return True
        return False

    def is_lapsed(self, today: date) -> bool:
        return today > self.valid_until

    @property
    def is_editable(self) -> bool:
        return self.status == QuoteStatus.DRAFT

    def assert_withdrawable(self) -> None:
        """Only a DRAFT quote, never seen by the buyer, may be withdrawn."""
        if self.status != QuoteStatus.DRAFT:
            raise InvalidTransition(
                f"Quote {self.quote_number} is {self.status.value}; "
                f"only DRAFT quotes can be withdrawn"
            )

    # --- Internal helpers -----------------------------------------------------

    def _transition(self, target: QuoteStatus) -> None:
        if target not in ALLOWED_TRANSITIONS[self.status]:
            raise InvalidTransition(
                f"Cannot move quote {self.quote_number} from "
                f"{self.status.value} to {target.value}"
            )
        self.status = target

    def _assert_editable(self) -> None:
        if not self.is_editable:
            raise QuoteNotEditable(
                f"Quote {self.quote_number} is {self.status.value}; "
                f"only DRAFT quotes can change line items"
            )

    def _find_item(self, line_id: str) -> QuoteLineItem:
        for item in self.items:
            if item.id == line_id:
                return item
        raise ValidationError(
            f"Line item '{line_id}' not found in quote {self.quote_number}"
        )

    def _recompute(self) -> None:
        subtotal = Money.zero(self.currency)
        for item in self.items:
            subtotal = subtotal + item.total_price
        self.subtotal = subtotal
        self.tax_amount = subtotal.apply_rate(self.tax_rate)
        self.total_amount = subtotal + self.tax_amount
