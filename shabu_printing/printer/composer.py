"""Receipt composer: turns a receipt job into printer bytes."""
from typing import Optional

from shabu_printing.models import PrinterModel, ReceiptJob
from shabu_printing.printer.codepage import encode
from shabu_printing.printer.escpos import DEFAULT_XPRINTER_CODEPAGE, get_builder

DIVIDER_WIDTH = 30
TABLE_LABEL = "โต๊ะ"
TABLE_PLACEHOLDER = "-"
NOTE_LABEL = "หมายเหตุ"
THANK_YOU = "ขอบคุณครับ/ค่ะ"
# Feed before the cut so the cutter clears the last printed line.
TRAILING_FEED = b'\n\n\n'


class ReceiptComposer:
    """Composes plain-text Thai receipts for ESC/POS printers.

    Text is encoded with the codepage paired to the printer model, so one
    payload never mixes encodings.
    """

    def __init__(self, xprinter_codepage: int = DEFAULT_XPRINTER_CODEPAGE,
                 show_quantity: bool = True, width: int = DIVIDER_WIDTH):
        """Initialize composer.

        Args:
            xprinter_codepage: ``ESC t``/``GS t`` numeral for XPrinter models
            show_quantity: Prefix each line with ``x{quantity}``
            width: Divider width in characters
        """
        self.xprinter_codepage = xprinter_codepage
        self.show_quantity = show_quantity
        self.width = width

    def compose(self, job: ReceiptJob) -> bytes:
        """Compose the full payload for a job's printer."""
        return self.compose_text(
            job.title, job.lines, job.target.model,
            table=job.table, note=job.note, cut_mode=job.target.cut_mode
        )

    def compose_text(self, title: str, lines, model: PrinterModel,
                     table: str = "", note: Optional[str] = None,
                     cut_mode=None) -> bytes:
        builder = get_builder(model, self.xprinter_codepage)
        codepage = builder.codepage

        chunks = [builder.build_init()]
        for segment in self._text_segments(title, lines, table, note):
            chunks.append(encode(segment, codepage))
        chunks.append(TRAILING_FEED)
        chunks.append(builder.build_cut(cut_mode))
        return b"".join(chunks)

    def preview(self, job: ReceiptJob) -> str:
        """Render the receipt as plain text, without control bytes."""
        return "".join(self._text_segments(job.title, job.lines, job.table, job.note))

    def format_line(self, line) -> str:
        if self.show_quantity:
            return f"x{line.quantity}  {line.name}\n"
        return f"{line.name}\n"

    def _text_segments(self, title, lines, table, note):
        divider = "-" * self.width + "\n"
        yield f"\n{title}\n"
        yield f"{TABLE_LABEL}: {table or TABLE_PLACEHOLDER}\n"
        yield divider
        for line in lines:
            yield self.format_line(line)
        if note:
            yield f"{NOTE_LABEL}: {note}\n"
        yield divider
        yield f"{THANK_YOU}\n"
