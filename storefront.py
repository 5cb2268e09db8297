"""Storefront client for the shop API and the simulated checkout flow."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

import httpx
from pydantic import BaseModel

logger = logging.getLogger(__name__)

TAX_RATE = 0.08

EMPTY_CART_MESSAGE = "Your cart is empty. Please add products before proceeding to payment."
MISSING_FIELDS_MESSAGE = "Please fill in all required fields"
PAYMENT_FAILED_MESSAGE = "There was an error processing your payment. Please try again."


class CheckoutError(Exception):
    """Checkout could not complete. `message` is safe to show to the customer."""

    def __init__(self, message: str, missing: Optional[List[str]] = None):
        self.message = message
        self.missing = missing or []
        super().__init__(message)


class Session:
    """Bearer token for one logged-in customer; unusable once closed."""

    def __init__(self, token: str):
        self._token = token

    @property
    def active(self) -> bool:
        return self._token is not None

    def headers(self) -> Dict[str, str]:
        if self._token is None:
            raise CheckoutError("Please log in to continue")
        return {"auth-token": self._token}

    def close(self) -> None:
        self._token = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class ShopClient:
    def __init__(self, base_url: str = "http://localhost:4000", client: Optional[httpx.Client] = None, timeout: float = 10.0):
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def _post(self, path: str, session: Optional[Session] = None, json: Optional[dict] = None) -> httpx.Response:
        headers = {"Accept": "application/json"}
        if session is not None:
            headers.update(session.headers())
        response = self._client.post(path, json=json, headers=headers)
        response.raise_for_status()
        return response

    def signup(self, username: str, email: str, password: str) -> Session:
        data = self._post("/signup", json={"username": username, "email": email, "password": password}).json()
        return Session(data["token"])

    def login(self, email: str, password: str) -> Session:
        data = self._post("/login", json={"email": email, "password": password}).json()
        return Session(data["token"])

    def all_products(self) -> List[dict]:
        response = self._client.get("/allproducts")
        response.raise_for_status()
        return response.json()

    def get_user(self, session: Session) -> dict:
        response = self._client.get("/getuser", headers=session.headers())
        response.raise_for_status()
        return response.json()

    def get_cart(self, session: Session) -> Dict[str, int]:
        return self._post("/getcart", session).json()

    def add_to_cart(self, session: Session, item_id: int) -> None:
        self._post("/addtocart", session, json={"itemId": item_id})

    def remove_from_cart(self, session: Session, item_id: int) -> None:
        self._post("/removefromcart", session, json={"itemId": item_id})

    def clear_cart(self, session: Session) -> None:
        self._post("/clearcart", session)


class PaymentMethod(str, Enum):
    CARD = "card"
    PAYPAL = "paypal"


ADDRESS_FIELDS = ("first_name", "last_name", "email", "address", "city", "zip_code")
CARD_FIELDS = ("card_number", "expiry", "cvv", "card_name")


class CheckoutForm(BaseModel):
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    address: str = ""
    city: str = ""
    zip_code: str = ""
    card_number: str = ""
    expiry: str = ""
    cvv: str = ""
    card_name: str = ""

    def missing_fields(self, method: PaymentMethod) -> List[str]:
        required = ADDRESS_FIELDS
        if PaymentMethod(method) is PaymentMethod.CARD:
            required = ADDRESS_FIELDS + CARD_FIELDS
        return [name for name in required if not getattr(self, name).strip()]


@dataclass
class OrderLine:
    product_id: int
    name: str
    unit_price: float
    quantity: int

    @property
    def total(self) -> float:
        return round(self.unit_price * self.quantity, 2)


@dataclass
class OrderSummary:
    lines: List[OrderLine] = field(default_factory=list)
    shipping: float = 0.0

    @property
    def subtotal(self) -> float:
        return round(sum(line.total for line in self.lines), 2)

    @property
    def tax(self) -> float:
        return round(self.subtotal * TAX_RATE, 2)

    @property
    def total(self) -> float:
        return round(self.subtotal + self.tax + self.shipping, 2)


def order_summary(products: List[dict], cart: Dict[str, int]) -> OrderSummary:
    summary = OrderSummary()
    for product in products:
        quantity = int(cart.get(str(product["id"]), 0))
        if quantity > 0:
            summary.lines.append(OrderLine(
                product_id=int(product["id"]),
                name=product.get("name", ""),
                unit_price=float(product.get("new_price") or 0),
                quantity=quantity,
            ))
    return summary


class CheckoutState(str, Enum):
    COLLECTING_INPUT = "collecting-input"
    VALIDATING = "validating"
    PROCESSING = "processing"
    DONE = "done"
    ERROR = "error"


class CheckoutFlow:
    def __init__(self, client: ShopClient, session: Session, drain: str = "bulk"):
        if drain not in ("bulk", "per-unit"):
            raise ValueError(f"unknown drain mode: {drain}")
        self.client = client
        self.session = session
        self.drain = drain
        self.state = CheckoutState.COLLECTING_INPUT
        self.error: Optional[str] = None

    def prefill_email(self, form: CheckoutForm) -> CheckoutForm:
        if form.email:
            return form
        try:
            profile = self.client.get_user(self.session)
        except httpx.HTTPError as e:
            logger.warning("Could not load account email: %s", e)
            return form
        return form.model_copy(update={"email": profile.get("email") or ""})

    def _fail(self, message: str, missing: Optional[List[str]] = None) -> CheckoutError:
        self.state = CheckoutState.ERROR
        self.error = message
        return CheckoutError(message, missing)

    def submit(self, form: CheckoutForm, method: PaymentMethod = PaymentMethod.CARD) -> OrderSummary:
        self.state = CheckoutState.VALIDATING
        self.error = None
        if not self.session.active:
            raise self._fail("Please log in to continue")
        try:
            cart = self.client.get_cart(self.session)
        except httpx.HTTPError as e:
            logger.warning("Could not load cart: %s", e)
            raise self._fail(PAYMENT_FAILED_MESSAGE) from e
        if not any(q > 0 for q in cart.values()):
            raise self._fail(EMPTY_CART_MESSAGE)

        missing = form.missing_fields(method)
        if missing:
            raise self._fail(MISSING_FIELDS_MESSAGE, missing)

        self.state = CheckoutState.PROCESSING
        try:
            summary = order_summary(self.client.all_products(), cart)
            # simulated payment: nothing is charged, the cart is emptied
            if self.drain == "bulk":
                self.client.clear_cart(self.session)
            else:
                self._drain_per_unit(cart)
        except httpx.HTTPError as e:
            logger.warning("Checkout failed while draining cart: %s", e)
            raise self._fail(PAYMENT_FAILED_MESSAGE) from e

        self.state = CheckoutState.DONE
        logger.info("Checkout complete: %d lines, total %.2f", len(summary.lines), summary.total)
        return summary

    def _drain_per_unit(self, cart: Dict[str, int]) -> None:
        # N units of an item cost N sequential calls; a failure leaves the rest in the cart
        for item_id, quantity in cart.items():
            for _ in range(quantity if quantity > 0 else 0):
                self.client.remove_from_cart(self.session, int(item_id))
