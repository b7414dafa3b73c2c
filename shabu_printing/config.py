"""Application configuration."""
import os


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Base configuration."""

    # Kitchen printers, keyed by the identifier categories are routed to
    PRINTER_TARGETS = {
        "EPSON": {
            "model": "EPSON",
            "host": os.environ.get("EPSON_PRINTER_HOST", "192.168.1.100"),
            "port": int(os.environ.get("EPSON_PRINTER_PORT", 9100)),
            "cut": os.environ.get("EPSON_PRINTER_CUT", "full"),
        },
        "XPRINTER": {
            "model": "XPRINTER",
            "host": os.environ.get("XPRINTER_HOST", "192.168.1.101"),
            "port": int(os.environ.get("XPRINTER_PORT", 9100)),
            "cut": os.environ.get("XPRINTER_CUT", "full"),
        },
    }
    DEFAULT_PRINTER = os.environ.get("DEFAULT_PRINTER", "EPSON")

    # XPrinter Thai (CP874) slot for ESC t / GS t
    XPRINTER_CODEPAGE = int(os.environ.get("XPR_CODEPAGE", 70))

    PRINT_DEADLINE_SECONDS = float(os.environ.get("PRINT_DEADLINE_SECONDS", 12))
    PRINT_DRAIN_DELAY_SECONDS = float(os.environ.get("PRINT_DRAIN_DELAY_SECONDS", 0.2))
    PRINT_CONCURRENT = _env_bool("PRINT_CONCURRENT", True)
    PRINT_SHOW_QUANTITY = _env_bool("PRINT_SHOW_QUANTITY", True)


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    PRINTER_TARGETS = {
        "EPSON": {"model": "EPSON", "host": "127.0.0.1", "port": 9100},
        "XPRINTER": {"model": "XPRINTER", "host": "127.0.0.1", "port": 9101},
    }
    DEFAULT_PRINTER = "EPSON"
    PRINT_DEADLINE_SECONDS = 2.0
    PRINT_DRAIN_DELAY_SECONDS = 0.0


config = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "default": DevelopmentConfig,
}
