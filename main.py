"""
Demonstration web server: renders the authenticator enrollment QR code
for one identity, alongside the last, current and next codes.

Not meant to be deployed as is.
"""
from flask import Response, abort, jsonify, render_template, request
import base64
import functools
import io
import logging
import sys
from urllib.parse import parse_qs, quote, urlparse

import qrcode

from knownids import OTPError, format_code, time_counter

# Import the app and its key store
from app import app

logger = logging.getLogger(__name__)


def init_keys():
    """Enroll the configured identity, with a forced or a fresh secret."""
    if app.otp_secret:
        app.keys.add_key(app.otp_id, app.otp_secret)
    else:
        app.keys.generate_key(app.otp_id)


@functools.lru_cache(maxsize=8)
def qr_png(uri: str) -> bytes:
    qr = qrcode.QRCode(error_correction=qrcode.constants.ERROR_CORRECT_H)
    qr.add_data(uri)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    img_io = io.BytesIO()
    img.save(img_io, 'PNG')
    return img_io.getvalue()


def enrollment_uri() -> str:
    try:
        return app.keys.enrollment_uri(app.otp_id)
    except OTPError as err:
        logger.error("no enrollment for %r: %s", app.otp_id, err)
        abort(404)


@app.route('/qr.png')
def qr_image():
    return Response(qr_png(enrollment_uri()), mimetype='image/png')


@app.route('/')
@app.route('/index.html')
def index():
    uri = enrollment_uri()

    # Extract the secret key from the provisioning URI
    query_params = parse_qs(urlparse(uri).query)
    secret_key = query_params.get('secret', [''])[0]

    now = time_counter()
    last, this, next_ = (format_code(app.keys.code(app.otp_id, now + i)) for i in (-1, 0, 1))

    if app.inline_qr:
        encoded = base64.b64encode(qr_png(uri)).decode('ascii')
        image = "data:image/png;base64," + quote(encoded, safe='')
    else:
        image = "qr.png"

    return render_template('index.html', image=image, issuer=app.keys.issuer,
                           otp_id=app.otp_id, secret=secret_key,
                           last=last, this=this, next=next_)


@app.route('/verify', methods=['POST'])
def verify():
    code = request.form.get('code', '').strip()
    return jsonify(valid=app.keys.validate_code(app.otp_id, code, 1))


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    try:
        init_keys()
    except OTPError as err:
        logger.error("failed to set up a secret for %r: %s", app.otp_id, err)
        sys.exit(1)
    app.run(host=app.listen_host, port=app.listen_port)
