"""
Cart arithmetic, client-side validation for bills and payments, and the
shareable invoice text.

Validation runs before any request is built: a rejected cart, payment or
restock never reaches the API. Failures raise ValidationError whose message
is shown inline next to the form.
"""

from dataclasses import asdict, dataclass, field
from datetime import date
from urllib.parse import quote

from erp_console.models.records import Bill, Product
from erp_console.utils import format_inr


class ValidationError(ValueError):
    """Raised when user input is rejected before submission."""


@dataclass(slots=True)
class CartItem:
    """A product line in the bill being built."""

    product_id: str
    product_name: str
    quantity: int
    unit_price: float
    net_price: float
    discount: float = 0.0

    @property
    def final_price(self) -> float:
        return self.unit_price - self.discount

    @property
    def total(self) -> float:
        return self.final_price * self.quantity

    def to_payload(self) -> dict:
        data = asdict(self)
        data["final_price"] = self.final_price
        data["total"] = self.total
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "CartItem":
        return cls(
            product_id=data["product_id"],
            product_name=data.get("product_name", ""),
            quantity=int(data.get("quantity", 1)),
            unit_price=float(data.get("unit_price", 0)),
            net_price=float(data.get("net_price", 0)),
            discount=float(data.get("discount", 0)),
        )


@dataclass(slots=True)
class Cart:
    """The bill under construction on the billing page."""

    items: list[CartItem] = field(default_factory=list)

    def add(self, product: Product, quantity: int = 1, discount: float = 0.0) -> CartItem:
        """
        Add ``quantity`` units of ``product`` at its MRP less ``discount``.

        Raises:
            ValidationError: If the quantity is not positive or exceeds the
                stock on hand, or the discounted price falls below the net
                price or above the MRP.
        """
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1")
        in_cart = sum(i.quantity for i in self.items if i.product_id == product.id)
        if in_cart + quantity > product.stock_quantity:
            raise ValidationError(
                f"Insufficient stock for {product.name} ({product.stock_quantity} available)"
            )
        final_price = product.sell_price - discount
        if final_price < product.net_price:
            raise ValidationError(f"Price below Net Price ({format_inr(product.net_price)})")
        if final_price > product.sell_price:
            raise ValidationError(f"Price above MRP ({format_inr(product.sell_price)})")
        item = CartItem(
            product_id=product.id,
            product_name=product.name,
            quantity=quantity,
            unit_price=product.sell_price,
            net_price=product.net_price,
            discount=discount,
        )
        self.items.append(item)
        return item

    def remove(self, index: int) -> None:
        del self.items[index]

    @property
    def grand_total(self) -> float:
        return sum(item.total for item in self.items)

    def balance(self, paid: float) -> float:
        return self.grand_total - paid

    def to_list(self) -> list[dict]:
        return [item.to_payload() for item in self.items]

    @classmethod
    def from_list(cls, data: list[dict] | None) -> "Cart":
        return cls(items=[CartItem.from_dict(item) for item in data or []])


def validate_bill(cart: Cart, customer_id: str | None, paid: float) -> None:
    """
    Check a bill before it is submitted.

    Raises:
        ValidationError: On an empty cart, a missing customer, a negative
            payment or a payment larger than the grand total.
    """
    if not cart.items:
        raise ValidationError("Cart is empty!")
    if not customer_id:
        raise ValidationError("Select a customer.")
    if paid < 0:
        raise ValidationError("Paid amount cannot be negative.")
    if paid > cart.grand_total:
        raise ValidationError(
            f"Paid amount exceeds the bill total of {format_inr(cart.grand_total)}"
        )


def validate_payment(bill: Bill, amount: float | None) -> float:
    """
    Check a payment against a bill's outstanding balance.

    Returns:
        The validated amount.

    Raises:
        ValidationError: If the amount is missing, not positive, or above the
            due balance.
    """
    if not amount or amount <= 0:
        raise ValidationError("Please enter a valid amount.")
    if amount > bill.balance:
        raise ValidationError(
            f"Amount cannot exceed the due balance of {format_inr(bill.balance)}"
        )
    return amount


def validate_restock(quantity: int | None) -> int:
    """Reject empty or non-positive restock quantities."""
    if not quantity or quantity <= 0:
        raise ValidationError("Restock quantity must be greater than zero.")
    return int(quantity)


def bill_payload(
    cart: Cart,
    customer_id: str,
    paid: float,
    next_service_date: date | str | None = None,
) -> dict:
    """Build the ``/billing/create`` request body for a validated cart."""
    if isinstance(next_service_date, date):
        next_service_date = next_service_date.isoformat()
    return {
        "customer_id": customer_id,
        "items": cart.to_list(),
        "paid_amount": float(paid or 0),
        "next_service_date": next_service_date or None,
    }


def payment_payload(bill_id: str, amount: float) -> dict:
    """Build the ``/billing/pay-due`` request body."""
    return {"sale_id": bill_id, "amount_paying": float(amount)}


_RULE = "-" * 32


def invoice_text(bill: Bill, company_name: str, company_gstin: str = "") -> str:
    """
    Render a bill as the plain-text invoice shown in the preview and shared
    over WhatsApp.

    The discount line appears only when the final amount is below the
    total, and the balance line only while something is still owed.
    """
    lines = ["*INVOICE*", f"*{company_name}*"]
    if company_gstin:
        lines.append(f"GSTIN: {company_gstin}")
    issued = bill.created_at.date() if bill.created_at else date.today()
    lines += [_RULE, f"Date: {issued:%d/%m/%Y}", f"Bill No: #{bill.invoice_no}", _RULE]
    lines.append(f"To: *{bill.customer_name or 'Guest'}*")
    if bill.customer_phone:
        lines.append(f"Ph: {bill.customer_phone}")
    lines += [_RULE, "*Items:*"]
    lines += [
        f"{index}. {item.product_name} x {item.quantity} = {format_inr(item.total)}"
        for index, item in enumerate(bill.items, start=1)
    ]
    lines += [_RULE, f"Subtotal: {format_inr(bill.total_amount or bill.amount)}"]
    discount = bill.total_amount - bill.final_amount if bill.final_amount else 0.0
    if discount > 0:
        lines.append(f"Discount: -{format_inr(discount)}")
    lines.append(f"*GRAND TOTAL: {format_inr(bill.amount)}*")
    if bill.balance > 0:
        lines.append(f"Balance Due: {format_inr(bill.balance)}")
    lines += [_RULE, "Thank you! Visit again."]
    return "\n".join(lines)


def whatsapp_url(phone: str, text: str, country_code: str = "91") -> str:
    """Return a ``whatsapp://send`` link; an empty phone opens the contact picker."""
    number = f"{country_code}{phone}" if phone else ""
    return f"whatsapp://send?phone={number}&text={quote(text)}"
