"""Printer module for ESC/POS thermal printing."""
from shabu_printing.printer.codepage import Codepage, encode, unmappable
from shabu_printing.printer.composer import ReceiptComposer
from shabu_printing.printer.connection import (
    ConnectFailure,
    NetworkPrinter,
    PrinterError,
    TimeoutFailure,
    WriteFailure,
    create_printer,
    deliver,
)
from shabu_printing.printer.escpos import (
    BuildError,
    CommandBuilder,
    EpsonBuilder,
    XPrinterBuilder,
    build_cut,
    build_init,
    get_builder,
)

__all__ = [
    "Codepage",
    "encode",
    "unmappable",
    "ReceiptComposer",
    "ConnectFailure",
    "NetworkPrinter",
    "PrinterError",
    "TimeoutFailure",
    "WriteFailure",
    "create_printer",
    "deliver",
    "BuildError",
    "CommandBuilder",
    "EpsonBuilder",
    "XPrinterBuilder",
    "build_cut",
    "build_init",
    "get_builder",
]
