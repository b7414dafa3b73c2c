"""Category based fan-out of an order to kitchen printers."""
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Mapping, Optional, Union

from shabu_printing.models import (
    DispatchOutcome,
    DispatchReport,
    Order,
    OrderItem,
    PrinterModel,
    PrinterTarget,
    ReceiptJob,
    ReceiptLine,
)
from shabu_printing.printer.composer import ReceiptComposer
from shabu_printing.printer.connection import (
    DEFAULT_DEADLINE,
    DEFAULT_DRAIN_DELAY,
    PrinterError,
    create_printer,
)
from shabu_printing.printer.escpos import DEFAULT_XPRINTER_CODEPAGE

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "SHABU ORDER"
TEST_NOTE = "ทดสอบการพิมพ์"

# Order id prefix, table and items of the test receipt per printer family
TEST_RECEIPTS = {
    PrinterModel.EPSON_TIS620: ("TEST", "TEST", (
        OrderItem("เนื้อออสเตรเลีย", 2, "หมู"),
        OrderItem("กุ้ง", 1, "ทะเล"),
    )),
    PrinterModel.XPRINTER_CP874: ("TESTX", "TEST-X", (
        OrderItem("หมูสไลซ์", 2, "หมู"),
        OrderItem("ปลาหมึก", 1, "ทะเล"),
    )),
}


def make_test_order(model: PrinterModel) -> Order:
    """Build the fixed Thai test order for a printer family."""
    prefix, table, items = TEST_RECEIPTS[model]
    suffix = str(int(time.time() * 1000))[-6:]
    return Order(order_id=f"{prefix}-{suffix}", items=items, table=table, note=TEST_NOTE)


TargetRef = Union[str, PrinterTarget]


class PrintRouter:
    """Splits an order across printers by category and prints each part.

    Every item goes to the printer its category is routed to; unrouted
    categories go to the default printer. The order note is printed on
    every receipt. A failing printer never stops the others.
    """

    def __init__(self, targets: Optional[Mapping[str, PrinterTarget]] = None,
                 default_target: Optional[TargetRef] = None,
                 xprinter_codepage: int = DEFAULT_XPRINTER_CODEPAGE,
                 deadline: float = DEFAULT_DEADLINE,
                 drain_delay: float = DEFAULT_DRAIN_DELAY,
                 concurrent: bool = True,
                 show_quantity: bool = True):
        self.targets = dict(targets or {})
        self.default_target = self._lookup(default_target)
        if self.default_target is None:
            raise ValueError(f"Unknown default printer: {default_target!r}")
        self.composer = ReceiptComposer(xprinter_codepage, show_quantity=show_quantity)
        self.deadline = deadline
        self.drain_delay = drain_delay
        self.concurrent = concurrent

    def _lookup(self, ref: Optional[TargetRef]) -> Optional[PrinterTarget]:
        if isinstance(ref, PrinterTarget):
            return ref
        if ref is None:
            return None
        return self.targets.get(ref)

    def resolve(self, category: str, routing: Optional[Mapping[str, TargetRef]] = None,
                default: Optional[PrinterTarget] = None) -> PrinterTarget:
        """Resolve a category to its printer."""
        default = default or self.default_target
        ref = (routing or {}).get(category)
        if ref is None:
            return default
        target = self._lookup(ref)
        if target is None:
            logger.warning("Category %r routed to unknown printer %r, using %s",
                           category, ref, default)
            return default
        return target

    def route(self, order: Order, routing: Optional[Mapping[str, TargetRef]] = None,
              default_target: Optional[TargetRef] = None) -> list:
        """Partition the order into one receipt job per printer.

        Items keep their relative order within each job, and jobs come out in
        the order their printer first appears. An order without items gives
        no jobs.
        """
        default = self._lookup(default_target) or self.default_target
        groups = {}
        for item in order.items:
            target = self.resolve(item.category, routing, default)
            groups.setdefault(target, []).append(ReceiptLine.from_item(item))

        title = order.order_id or DEFAULT_TITLE
        note = order.note or None
        return [
            ReceiptJob(title=title, lines=tuple(lines), target=target,
                       table=order.table, note=note)
            for target, lines in groups.items()
        ]

    def payloads(self, order: Order, routing: Optional[Mapping[str, TargetRef]] = None,
                 default_target: Optional[TargetRef] = None) -> dict:
        """Composed bytes per printer, without any I/O."""
        return {
            job.target: self.composer.compose(job)
            for job in self.route(order, routing, default_target)
        }

    def deliver(self, job: ReceiptJob, payload: bytes) -> DispatchOutcome:
        """Send one composed job and report how it went."""
        printer = create_printer(job.target, self.deadline, self.drain_delay)
        started = time.monotonic()
        try:
            printer.print_data(payload)
        except PrinterError as e:
            elapsed_ms = int((time.monotonic() - started) * 1000)
            logger.warning("Print to %s failed (%s) after %dms: %s",
                           job.target, e.kind.value, elapsed_ms, e)
            return DispatchOutcome(
                target=job.target,
                succeeded=False,
                elapsed_ms=elapsed_ms,
                error_kind=e.kind,
                detail=str(e),
            )

        elapsed_ms = int((time.monotonic() - started) * 1000)
        logger.info("Printed %s (%d lines, %d bytes) on %s in %dms",
                    job.title, len(job.lines), len(payload), job.target, elapsed_ms)
        return DispatchOutcome(target=job.target, succeeded=True, elapsed_ms=elapsed_ms)

    def dispatch(self, jobs: list) -> DispatchReport:
        """Compose and deliver every job, one outcome per job in job order."""
        # Composing first makes an unknown printer model fail before any I/O.
        payloads = [self.composer.compose(job) for job in jobs]
        for job in jobs:
            logger.debug("Receipt for %s:\n%s", job.target, self.composer.preview(job))

        if self.concurrent and len(jobs) > 1:
            with ThreadPoolExecutor(max_workers=len(jobs)) as executor:
                futures = [
                    executor.submit(self.deliver, job, payload)
                    for job, payload in zip(jobs, payloads)
                ]
                outcomes = [future.result() for future in futures]
        else:
            outcomes = [self.deliver(job, payload) for job, payload in zip(jobs, payloads)]

        return DispatchReport.from_outcomes(outcomes)

    def print_order(self, order: Order, routing: Optional[Mapping[str, TargetRef]] = None,
                    default_target: Optional[TargetRef] = None) -> DispatchReport:
        """Route and print an order; printer failures are reported, not raised."""
        jobs = self.route(order, routing, default_target)
        if not jobs:
            logger.info("Order %s has no items, nothing to print", order.order_id)
            return DispatchReport()

        report = self.dispatch(jobs)
        self._log_failures(order, report)
        return report

    def print_test(self, printer: TargetRef) -> DispatchReport:
        """Print the test receipt on one configured printer.

        Raises:
            ValueError: if the printer is not configured.
        """
        target = self._lookup(printer)
        if target is None:
            raise ValueError(f"Unknown printer: {printer!r}")
        order = make_test_order(target.model)
        report = self.dispatch(self.route(order, default_target=target))
        self._log_failures(order, report)
        return report

    def _log_failures(self, order: Order, report: DispatchReport) -> None:
        if report.failed:
            logger.warning("Order %s: %d of %d receipts failed to print",
                           order.order_id, len(report.failed), len(report))
