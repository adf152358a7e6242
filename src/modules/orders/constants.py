"""Order domain constants.

Status, payment and refund choices, plus the transition maps of the
order state machine and of the refund sub-flow.  The string values are
the wire contract and are stored/serialized verbatim.
"""

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    CONFIRMED = "confirmed", "Confirmed"
    PROCESSING = "processing", "Processing"
    PACKING = "packing", "Packing"
    PACKED = "packed", "Packed"
    SHIPPED = "shipped", "Shipped"
    DELIVERED = "delivered", "Delivered"
    CANCELLED = "cancelled", "Cancelled"


class PaymentMethod(models.TextChoices):
    RAZORPAY = "razorpay", "Razorpay"
    COD = "cod", "Cash on delivery"
    UPI = "upi", "UPI"


class PaymentStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PAID = "paid", "Paid"
    FAILED = "failed", "Failed"
    REFUNDED = "refunded", "Refunded"


class RefundStatus(models.TextChoices):
    STARTED = "started", "Started"
    PROCESSING = "processing", "Processing"
    COMPLETED = "completed", "Completed"
    FAILED = "failed", "Failed"


ONLINE_PAYMENT_METHODS: frozenset[str] = frozenset(
    {PaymentMethod.RAZORPAY, PaymentMethod.UPI}
)

# Linear happy path; ``cancelled`` is added for every non-terminal state.
FORWARD_PATH: tuple[str, ...] = (
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
    OrderStatus.PACKING,
    OrderStatus.PACKED,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
)

TERMINAL_STATES: frozenset[str] = frozenset(
    {OrderStatus.DELIVERED, OrderStatus.CANCELLED}
)

NEXT_STATUS: dict[str, str] = dict(zip(FORWARD_PATH, FORWARD_PATH[1:]))

VALID_TRANSITIONS: dict[str, set[str]] = {
    status: (
        set()
        if status in TERMINAL_STATES
        else {NEXT_STATUS[status], OrderStatus.CANCELLED}
    )
    for status in OrderStatus.values
}

# ``None`` is the state of an order whose refund was never started.
REFUND_TRANSITIONS: dict[str | None, set[str]] = {
    None: {RefundStatus.STARTED},
    RefundStatus.STARTED: {RefundStatus.PROCESSING, RefundStatus.FAILED},
    RefundStatus.PROCESSING: {RefundStatus.COMPLETED, RefundStatus.FAILED},
    RefundStatus.FAILED: {RefundStatus.STARTED},
    RefundStatus.COMPLETED: set(),
}

REFUNDABLE_PAYMENT_STATUSES: frozenset[str] = frozenset(
    {PaymentStatus.PAID, PaymentStatus.REFUNDED}
)

ORDER_NUMBER_SEQUENCE_WIDTH = 6
