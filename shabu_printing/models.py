"""Value types shared by the printing pipeline."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class PrinterModel(Enum):
    """Printer families; the value matches the category ``printer`` field."""
    EPSON_TIS620 = "EPSON"
    XPRINTER_CP874 = "XPRINTER"


class CutMode(Enum):
    """ESC/POS paper cut commands."""
    FEED_FULL = b'\x1d\x56\x41\x10'     # GS V A 16 - feed 16 dots, full cut
    FEED_PARTIAL = b'\x1d\x56\x42\x00'  # GS V B 0 - feed, partial cut


class ErrorKind(Enum):
    CONNECT = "connect"
    WRITE = "write"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class PrinterTarget:
    """A physical network printer."""
    model: PrinterModel
    host: str
    port: int = 9100
    cut_mode: CutMode = CutMode.FEED_FULL
    name: str = ""

    def __post_init__(self):
        if not isinstance(self.port, int) or not 1 <= self.port <= 65535:
            raise ValueError(f"Invalid printer port: {self.port!r}")
        if not self.host:
            raise ValueError("Printer host is required")

    @classmethod
    def from_config(cls, config: dict, name: str = "") -> "PrinterTarget":
        """Build a target from a config dict.

        Args:
            config: {"model": "EPSON", "host": "192.168.1.100", "port": 9100, "cut": "full"}
            name: Identifier the target is registered under.
        """
        model = config.get("model", name)
        if not isinstance(model, PrinterModel):
            model = PrinterModel(str(model).upper())

        cut = config.get("cut", "full")
        if not isinstance(cut, CutMode):
            cut = CutMode.FEED_PARTIAL if str(cut).lower() == "partial" else CutMode.FEED_FULL

        return cls(
            model=model,
            host=config.get("host", ""),
            port=int(config.get("port", 9100)),
            cut_mode=cut,
            name=name,
        )

    def __str__(self):
        label = self.name or self.model.value
        return f"{label}@{self.host}:{self.port}"


@dataclass(frozen=True)
class OrderItem:
    name: str
    qty: Any = 1
    category: str = ""


@dataclass(frozen=True)
class Order:
    """An accepted order as handed over by the order-creation handler."""
    order_id: str
    items: tuple = ()
    table: str = ""
    note: str = ""

    @classmethod
    def from_dict(cls, payload: dict) -> "Order":
        """Build an order from a ``new-order`` payload."""
        items = tuple(
            OrderItem(
                name=str(item.get("name") or ""),
                qty=item.get("qty", 1),
                category=str(item.get("category") or ""),
            )
            for item in payload.get("items") or []
        )
        return cls(
            order_id=str(payload.get("orderId") or payload.get("order_id") or ""),
            items=items,
            table=str(payload.get("table") or ""),
            note=str(payload.get("note") or ""),
        )


def normalize_quantity(value: Any) -> int:
    """Coerce a source quantity; missing or non-positive becomes 1."""
    try:
        qty = int(value)
    except (TypeError, ValueError):
        return 1
    return qty if qty >= 1 else 1


@dataclass(frozen=True)
class ReceiptLine:
    name: str
    quantity: int = 1

    def __post_init__(self):
        if not isinstance(self.quantity, int) or self.quantity < 1:
            raise ValueError(f"Invalid line quantity: {self.quantity!r}")

    @classmethod
    def from_item(cls, item: OrderItem) -> "ReceiptLine":
        return cls(name=item.name, quantity=normalize_quantity(item.qty))


@dataclass(frozen=True)
class ReceiptJob:
    """One receipt addressed to one printer."""
    title: str
    lines: tuple
    target: PrinterTarget
    table: str = ""
    note: Optional[str] = None


@dataclass(frozen=True)
class DispatchOutcome:
    target: PrinterTarget
    succeeded: bool
    elapsed_ms: int
    error_kind: Optional[ErrorKind] = None
    detail: str = ""

    def to_dict(self):
        """Convert to dictionary for logging or API responses."""
        return {
            "printer": str(self.target),
            "succeeded": self.succeeded,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "elapsed_ms": self.elapsed_ms,
            "detail": self.detail,
        }


@dataclass
class DispatchReport:
    """Outcomes of printing one order, one per dispatched job."""
    outcomes: list = field(default_factory=list)
    printed_at: Optional[datetime] = None

    @classmethod
    def from_outcomes(cls, outcomes: list) -> "DispatchReport":
        report = cls(outcomes=list(outcomes))
        if report.succeeded:
            report.printed_at = datetime.now(timezone.utc)
        return report

    @property
    def succeeded(self) -> list:
        return [o for o in self.outcomes if o.succeeded]

    @property
    def failed(self) -> list:
        return [o for o in self.outcomes if not o.succeeded]

    @property
    def all_succeeded(self) -> bool:
        return bool(self.outcomes) and not self.failed

    def to_dict(self):
        return {
            "outcomes": [o.to_dict() for o in self.outcomes],
            "printed_at": self.printed_at.isoformat() if self.printed_at else None,
        }

    def __len__(self):
        return len(self.outcomes)
