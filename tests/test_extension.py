import pytest
from flask import Flask

from shabu_printing import create_app
from shabu_printing.extension import EXTENSION_KEY, ReceiptPrinting, create_targets
from shabu_printing.models import CutMode, Order, PrinterModel, PrinterTarget
from shabu_printing.router import PrintRouter


@pytest.fixture
def app():
    return create_app("testing")


def test_create_app_registers_router(app):
    router = app.extensions[EXTENSION_KEY]
    assert isinstance(router, PrintRouter)
    assert router.default_target.name == "EPSON"
    assert router.targets["XPRINTER"].model is PrinterModel.XPRINTER_CP874
    assert router.targets["XPRINTER"].port == 9101
    assert router.composer.xprinter_codepage == 70


def test_create_targets_from_settings():
    targets = create_targets({
        "GRILL": {"model": "epson", "host": "192.168.1.20", "cut": "partial"},
    })
    assert targets["GRILL"] == PrinterTarget(
        PrinterModel.EPSON_TIS620, "192.168.1.20", 9100, CutMode.FEED_PARTIAL, "GRILL"
    )


def test_invalid_port_in_settings_is_rejected():
    with pytest.raises(ValueError):
        create_targets({"EPSON": {"model": "EPSON", "host": "10.0.0.1", "port": 70000}})


def test_print_order_from_payload(printer_server):
    server = printer_server()
    app = Flask(__name__)
    app.config.update(
        PRINTER_TARGETS={"XPRINTER": {"model": "XPRINTER", "host": "127.0.0.1", "port": server.port}},
        DEFAULT_PRINTER="XPRINTER",
        XPRINTER_CODEPAGE=21,
        PRINT_DRAIN_DELAY_SECONDS=0.0,
        PRINT_DEADLINE_SECONDS=2.0,
    )
    printing = ReceiptPrinting(app)

    payload = {
        "orderId": "TESTX-123456",
        "table": "TEST-X",
        "note": "ทดสอบ",
        "items": [
            {"name": "หมูสไลซ์", "qty": 2, "category": "หมู"},
            {"name": "ปลาหมึก", "qty": 1, "category": "ทะเล"},
        ],
    }
    with app.app_context():
        report = printing.print_order(payload)

    assert report.all_succeeded
    data = server.next_payload()
    assert data.startswith(b"\x1b\x40\x1c\x2e\x1b\x52\x00\x1b\x74\x15\x1d\x74\x15")
    text = data.decode("cp874", errors="replace")
    assert "TESTX-123456" in text
    assert "โต๊ะ: TEST-X" in text
    assert text.index("หมูสไลซ์") < text.index("ปลาหมึก")


def test_empty_payload_prints_nothing(app):
    printing = ReceiptPrinting()
    with app.app_context():
        report = printing.print_order({"orderId": "X", "items": []})
    assert report.outcomes == []


def test_order_from_dict_defaults():
    order = Order.from_dict({"orderId": 42, "items": [{"name": "กุ้ง"}]})
    assert order.order_id == "42"
    assert order.table == ""
    assert order.note == ""
    assert order.items[0].qty == 1
    assert order.items[0].category == ""


def test_print_test_on_named_printer(printer_server):
    server = printer_server()
    app = Flask(__name__)
    app.config.update(
        PRINTER_TARGETS={
            "EPSON": {"model": "EPSON", "host": "127.0.0.1", "port": server.port},
            "XPRINTER": {"model": "XPRINTER", "host": "127.0.0.1", "port": 9101},
        },
        DEFAULT_PRINTER="XPRINTER",
        PRINT_DRAIN_DELAY_SECONDS=0.0,
        PRINT_DEADLINE_SECONDS=2.0,
    )
    printing = ReceiptPrinting(app)

    with app.app_context():
        report = printing.print_test("EPSON")

    assert report.all_succeeded
    data = server.next_payload()
    assert data.startswith(b"\x1b\x40\x1b\x52\x0b\x1b\x74\x15")
    assert "เนื้อออสเตรเลีย" in data.decode("tis_620", errors="replace")
