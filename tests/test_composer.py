import pytest

from shabu_printing.models import CutMode, PrinterModel, PrinterTarget, ReceiptJob, ReceiptLine
from shabu_printing.printer.codepage import Codepage
from shabu_printing.printer.composer import TRAILING_FEED, ReceiptComposer
from shabu_printing.printer.escpos import build_cut, build_init

EPSON = PrinterTarget(PrinterModel.EPSON_TIS620, "10.0.0.5", name="EPSON")
XPRINTER = PrinterTarget(PrinterModel.XPRINTER_CP874, "10.0.0.6", name="XPRINTER")
CODEPAGES = {
    PrinterModel.EPSON_TIS620: Codepage.TIS620,
    PrinterModel.XPRINTER_CP874: Codepage.CP874,
}


def make_job(target, lines=None, note=None, table="5"):
    if lines is None:
        lines = (ReceiptLine("หมูสไลซ์", 2), ReceiptLine("ปลาหมึก", 1))
    return ReceiptJob(title="A1B2", lines=tuple(lines), target=target, table=table, note=note)


def text_of(payload, target, composer=None):
    """Decode the text between the init commands and the feed+cut."""
    composer = composer or ReceiptComposer()
    init = build_init(target.model, composer.xprinter_codepage)
    tail = TRAILING_FEED + build_cut(target.cut_mode)
    assert payload.startswith(init)
    assert payload.endswith(tail)
    return payload[len(init):-len(tail)].decode(CODEPAGES[target.model].codec)


@pytest.mark.parametrize("target", [EPSON, XPRINTER])
def test_lines_carry_quantity_and_name(target):
    text = text_of(ReceiptComposer().compose(make_job(target)), target)
    assert "x2  หมูสไลซ์\n" in text
    assert "x1  ปลาหมึก\n" in text


@pytest.mark.parametrize("target", [EPSON, XPRINTER])
def test_layout(target):
    job = make_job(target, note="ไม่ใส่ผัก")
    text = text_of(ReceiptComposer().compose(job), target)
    divider = "-" * 30 + "\n"
    assert text == (
        "\nA1B2\n"
        "โต๊ะ: 5\n"
        + divider
        + "x2  หมูสไลซ์\n"
        "x1  ปลาหมึก\n"
        "หมายเหตุ: ไม่ใส่ผัก\n"
        + divider
        + "ขอบคุณครับ/ค่ะ\n"
    )


def test_same_text_encodes_per_model():
    composer = ReceiptComposer()
    epson = composer.compose(make_job(EPSON))
    xprinter = composer.compose(make_job(XPRINTER))
    assert epson.startswith(b"\x1b\x40\x1b\x52\x0b\x1b\x74\x15")
    assert xprinter.startswith(b"\x1b\x40\x1c\x2e")
    assert epson != xprinter


def test_repeated_names_are_not_merged():
    lines = [ReceiptLine("กุ้ง", 1), ReceiptLine("ผัก", 3), ReceiptLine("กุ้ง", 1)]
    text = text_of(ReceiptComposer().compose(make_job(EPSON, lines)), EPSON)
    assert text.count("x1  กุ้ง\n") == 2
    assert text.index("x3  ผัก") < text.rindex("x1  กุ้ง")


def test_names_only_style():
    composer = ReceiptComposer(show_quantity=False)
    text = text_of(composer.compose(make_job(EPSON)), EPSON, composer)
    assert "\nหมูสไลซ์\n" in text
    assert "x2" not in text


def test_empty_job_still_produces_a_receipt():
    payload = ReceiptComposer().compose(make_job(EPSON, lines=[], table=""))
    text = text_of(payload, EPSON)
    assert text.count("-" * 30) == 2
    assert "โต๊ะ: -\n" in text
    assert "ขอบคุณครับ/ค่ะ" in text


def test_no_note_line_without_note():
    text = text_of(ReceiptComposer().compose(make_job(XPRINTER)), XPRINTER)
    assert "หมายเหตุ" not in text


def test_target_cut_mode_is_used():
    target = PrinterTarget(PrinterModel.XPRINTER_CP874, "10.0.0.7", cut_mode=CutMode.FEED_PARTIAL)
    payload = ReceiptComposer().compose(make_job(target))
    assert payload.endswith(b"\n\n\n\x1d\x56\x42\x00")


def test_configured_xprinter_codepage_reaches_payload():
    composer = ReceiptComposer(xprinter_codepage=21)
    payload = composer.compose(make_job(XPRINTER))
    assert payload.startswith(b"\x1b\x40\x1c\x2e\x1b\x52\x00\x1b\x74\x15\x1d\x74\x15")


def test_unmappable_text_degrades_instead_of_failing():
    job = make_job(EPSON, lines=[ReceiptLine("ชาไทย 🧋", 1)])
    text = text_of(ReceiptComposer().compose(job), EPSON)
    assert "x1  ชาไทย ?\n" in text


def test_preview_matches_printed_text():
    composer = ReceiptComposer()
    job = make_job(XPRINTER, note="เผ็ดน้อย")
    assert composer.preview(job) == text_of(composer.compose(job), XPRINTER)
