"""Kitchen receipt printing for the Shabu self-order system."""
from flask import Flask

from shabu_printing.extension import ReceiptPrinting

printing = ReceiptPrinting()


def create_app(config_name: str = "default"):
    """Create a Flask application with receipt printing configured."""
    app = Flask(__name__)

    # Load configuration
    from shabu_printing.config import config
    app.config.from_object(config[config_name])

    # Initialize extensions
    printing.init_app(app)

    return app
