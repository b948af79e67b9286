"""
FLASK APP ENTRY POINT - HOTP KEY PANEL
======================================

Builds the Flask app, enables CORS, starts one KeyDevice and registers the
key routes.

Run:
    hotp-key-server                 (http://127.0.0.1:5000)
    HOTP_PORT=8000 hotp-key-server
"""
import logging
import os

from flask import Flask, jsonify
from flask_cors import CORS

from hotp_core.config import load_config

from .device import KeyDevice
from .routes import key_bp


def create_app(device=None, config=None):
    """
    Application factory.

    :param device: an already started KeyDevice; a new one is built and
        started from `config` if omitted
    :param config: overrides passed to load_config()
    :raises DigitConfigInvalid: on a bad digit count, before anything starts
    """
    app = Flask(__name__)
    # frontends on another origin may drive the panel
    CORS(app)

    if device is None:
        device = KeyDevice(load_config(config))
        device.start()
    app.extensions["hotp_key"] = device

    app.register_blueprint(key_bp)

    @app.route('/', methods=['GET'])
    def index():
        return jsonify({
            "name": "hotp-key",
            "endpoints": {
                "POST /api/key/press": "button press; body {\"long\": true} for a long press",
                "POST /api/key/provision": "body {\"secret\": base32} or {\"random\": true}",
                "GET /api/key/status": "state, counter, digits, algorithm",
                "GET /api/key/otpauth_uri": "otpauth://hotp URI for the current secret",
            },
        })

    return app


def main():
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    app = create_app()
    app.run(
        host=os.environ.get("HOTP_HOST", "127.0.0.1"),
        port=int(os.environ.get("HOTP_PORT", "5000")),
    )


if __name__ == '__main__':
    main()
