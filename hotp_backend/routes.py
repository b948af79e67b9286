"""
HOTP KEY API ROUTES - FLASK BLUEPRINT

A virtual front panel for the key: a button, an enrollment port and a status
readout. Every call goes through the KeyDevice queue.

EXAMPLES:
curl -X POST http://localhost:5000/api/key/provision -H "Content-Type: application/json" -d '{"secret": "JBSWY3DPEHPK3PXP"}'
curl -X POST http://localhost:5000/api/key/press
curl http://localhost:5000/api/key/status
curl "http://localhost:5000/api/key/otpauth_uri?account=alice&issuer=MyApp"
"""

import logging
from concurrent.futures import TimeoutError as FutureTimeout

from flask import Blueprint, current_app, jsonify, request

from hotp_core.errors import CounterExhausted, HashFailure, SecretTooLong, Unconfigured
from hotp_core.otp_core import decode_base32_secret, generate_base32_secret

logger = logging.getLogger(__name__)

key_bp = Blueprint('key', __name__, url_prefix='/api/key')

ERROR_STATUS = {
    Unconfigured: 409,
    CounterExhausted: 409,
    SecretTooLong: 413,
    HashFailure: 503,
}


def _device():
    return current_app.extensions["hotp_key"]


def _json_object():
    """The JSON body as a dict ({} when absent), or None if it is not an object."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        return None
    return data


def _bad_body():
    return jsonify({"error": "JSON body must be an object"}), 400


def _error_response(error):
    status = ERROR_STATUS.get(type(error), 500)
    return jsonify({"error": str(error), "kind": type(error).__name__}), status


@key_bp.errorhandler(FutureTimeout)
def _key_timeout(error):
    logger.error("HOTP key did not answer within the request timeout")
    return jsonify({"error": "HOTP key did not respond"}), 504


@key_bp.route('/press', methods=['POST'])
def press():
    """
    PRESS THE BUTTON

      curl -X POST http://localhost:5000/api/key/press
      curl -X POST http://localhost:5000/api/key/press -H "Content-Type: application/json" -d '{"long": true}'

    Output:
      {"typed": "123456"}          short press on a configured key
      {"ignored": true}  (202)     long press
      {"error": ..., "kind": "Unconfigured"}  (409)
    """
    data = _json_object()
    if data is None:
        return _bad_body()
    if data.get('long'):
        _device().press(long=True)
        return jsonify({"ignored": True, "message": "Long press is not supported"}), 202

    ok, value = _device().press()
    if not ok:
        return _error_response(value)
    return jsonify({"typed": value})


@key_bp.route('/provision', methods=['POST'])
def provision():
    """
    PROGRAM A NEW SECRET (resets the counter to 0)

      curl -X POST http://localhost:5000/api/key/provision -H "Content-Type: application/json" -d '{"secret": "JBSWY3DPEHPK3PXP"}'
      curl -X POST http://localhost:5000/api/key/provision -H "Content-Type: application/json" -d '{"random": true}'

    Input (JSON body):
      {"secret": "<base32>"}   or   {"random": true}

    Output:
      {"configured": true, "length": 10}
      with "secret" included only when it was generated here
    """
    data = _json_object()
    if data is None:
        return _bad_body()
    generated = bool(data.get('random'))
    if generated:
        secret_b32 = generate_base32_secret()
    else:
        secret_b32 = data.get('secret')
        if not isinstance(secret_b32, str):
            return jsonify({"error": "Base32 'secret' or 'random': true is required"}), 400

    try:
        raw = decode_base32_secret(secret_b32)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    ok, value = _device().provision(raw)
    if not ok:
        return _error_response(value)

    body = {"configured": len(raw) > 0, "length": len(raw)}
    if generated:
        body["secret"] = secret_b32
    return jsonify(body)


@key_bp.route('/status', methods=['GET'])
def status():
    """
    KEY STATUS

      curl http://localhost:5000/api/key/status

    Output:
      {"state": "awaiting_trigger", "configured": true, "counter": 3,
       "secret_length": 2, "digits": 6, "algorithm": "sha256"}
    """
    return jsonify(_device().status())


@key_bp.route('/otpauth_uri', methods=['GET'])
def otpauth_uri():
    """
    URI FOR ENROLLING THE KEY IN A VERIFIER

      curl "http://localhost:5000/api/key/otpauth_uri?account=alice&issuer=MyApp"

    Query params:
      account: account label (default "security-key")
      issuer: issuer label (default "hotp-key")
    """
    account = request.args.get('account', "security-key")
    issuer = request.args.get('issuer', "hotp-key")
    ok, value = _device().otpauth_uri(account, issuer)
    if not ok:
        return _error_response(value)
    return jsonify({"hotp_uri": value})
