"""ESC/POS command builders for Thai thermal printers."""
from abc import ABC, abstractmethod
from typing import Optional

from shabu_printing.models import CutMode, PrinterModel
from shabu_printing.printer.codepage import Codepage

DEFAULT_XPRINTER_CODEPAGE = 70


class BuildError(LookupError):
    """Raised for a printer model with no command builder."""


class CommandBuilder(ABC):
    """Byte sequences a printer family needs around the receipt text."""

    # ESC/POS Command Constants
    ESC = b'\x1b'
    GS = b'\x1d'
    FS = b'\x1c'

    # Initialize printer
    INIT = ESC + b'\x40'  # ESC @

    # Paper control
    DEFAULT_CUT = CutMode.FEED_FULL

    codepage: Codepage

    @abstractmethod
    def build_init(self) -> bytes:
        """Reset the device and select the Thai character tables."""
        pass

    def build_cut(self, mode: Optional[CutMode] = None) -> bytes:
        """Return the paper cut command."""
        return (mode or self.DEFAULT_CUT).value


class EpsonBuilder(CommandBuilder):
    """Epson-class firmware using the TIS-620 table."""

    CHARSET_THAI = CommandBuilder.ESC + b'\x52\x0b'      # ESC R 11
    CODEPAGE_TIS620 = CommandBuilder.ESC + b'\x74\x15'   # ESC t 21

    codepage = Codepage.TIS620

    def build_init(self) -> bytes:
        return self.INIT + self.CHARSET_THAI + self.CODEPAGE_TIS620

    def __repr__(self):
        return "EpsonBuilder()"


class XPrinterBuilder(CommandBuilder):
    """XPrinter-class firmware using the CP874 table.

    The codepage numeral is sent with both ``ESC t`` and ``GS t`` because
    firmware revisions honour one or the other.
    """

    CANCEL_CHINESE = CommandBuilder.FS + b'\x2e'        # FS .
    CHARSET_USA = CommandBuilder.ESC + b'\x52\x00'      # ESC R 0
    SELECT_CODEPAGE = CommandBuilder.ESC + b'\x74'      # ESC t n
    SELECT_CODEPAGE_ALT = CommandBuilder.GS + b'\x74'   # GS t n
    FONT_A = CommandBuilder.ESC + b'\x4d\x00'           # ESC M 0

    codepage = Codepage.CP874

    def __init__(self, codepage_number: int = DEFAULT_XPRINTER_CODEPAGE):
        if not 0 <= int(codepage_number) <= 255:
            raise ValueError(f"Codepage number out of range: {codepage_number}")
        self.codepage_number = int(codepage_number)

    def build_init(self) -> bytes:
        n = bytes((self.codepage_number,))
        return (
            self.INIT
            + self.CANCEL_CHINESE
            + self.CHARSET_USA
            + self.SELECT_CODEPAGE + n
            + self.SELECT_CODEPAGE_ALT + n
            + self.FONT_A
        )

    def __repr__(self):
        return f"XPrinterBuilder({self.codepage_number})"


BUILDERS = {
    PrinterModel.EPSON_TIS620: EpsonBuilder,
    PrinterModel.XPRINTER_CP874: XPrinterBuilder,
}


def get_builder(model: PrinterModel,
                xprinter_codepage: int = DEFAULT_XPRINTER_CODEPAGE) -> CommandBuilder:
    """Return the command builder for a printer model.

    Raises:
        BuildError: if the model has no builder.
    """
    try:
        builder_class = BUILDERS[model]
    except (KeyError, TypeError):
        raise BuildError(f"No command builder for printer model {model!r}")

    if builder_class is XPrinterBuilder:
        return XPrinterBuilder(xprinter_codepage)
    return builder_class()


def build_init(model: PrinterModel,
               xprinter_codepage: int = DEFAULT_XPRINTER_CODEPAGE) -> bytes:
    return get_builder(model, xprinter_codepage).build_init()


def build_cut(mode: Optional[CutMode] = None) -> bytes:
    return (mode or CommandBuilder.DEFAULT_CUT).value
