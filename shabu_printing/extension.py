"""Flask extension exposing the print router to the order handlers."""
import logging

from flask import current_app

from shabu_printing.models import Order, PrinterTarget
from shabu_printing.router import PrintRouter

logger = logging.getLogger(__name__)

EXTENSION_KEY = "receipt_printing"


def create_targets(printer_configs: dict) -> dict:
    """Build the printer registry from the ``PRINTER_TARGETS`` setting."""
    return {
        name: PrinterTarget.from_config(printer_config, name=name)
        for name, printer_config in printer_configs.items()
    }


class ReceiptPrinting:
    """Receipt printing for a Flask app.

    Usage::

        printing = ReceiptPrinting()
        printing.init_app(app)

        # inside the order-creation view, after the order is saved
        report = printing.print_order(order, {"Meat": "EPSON", "Seafood": "XPRINTER"})
        if report.printed_at:
            saved_order.printed_at = report.printed_at
    """

    def __init__(self, app=None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        app.config.setdefault("PRINTER_TARGETS", {})
        app.config.setdefault("DEFAULT_PRINTER", "EPSON")

        targets = create_targets(app.config["PRINTER_TARGETS"])
        router = PrintRouter(
            targets=targets,
            default_target=app.config["DEFAULT_PRINTER"],
            xprinter_codepage=app.config.get("XPRINTER_CODEPAGE", 70),
            deadline=app.config.get("PRINT_DEADLINE_SECONDS", 12.0),
            drain_delay=app.config.get("PRINT_DRAIN_DELAY_SECONDS", 0.2),
            concurrent=app.config.get("PRINT_CONCURRENT", True),
            show_quantity=app.config.get("PRINT_SHOW_QUANTITY", True),
        )
        app.extensions[EXTENSION_KEY] = router
        logger.debug("Receipt printers: %s", ", ".join(str(t) for t in targets.values()))

    @property
    def router(self) -> PrintRouter:
        return current_app.extensions[EXTENSION_KEY]

    def print_order(self, order, routing=None, default_target=None):
        """Print an order (an ``Order`` or a ``new-order`` payload dict)."""
        if isinstance(order, dict):
            order = Order.from_dict(order)
        return self.router.print_order(order, routing, default_target)

    def print_test(self, printer_id):
        """Print the fixed Thai test receipt on a configured printer."""
        return self.router.print_test(printer_id)
