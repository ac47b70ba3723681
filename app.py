from flask import Flask
import os

from knownids import KeyStore

app = Flask(__name__)

app.secret_key   = os.environ.get('SECRET_KEY')

app.issuer       = os.environ.get('OTP_ISSUER', 'myOTP')
app.otp_id       = os.environ.get('OTP_ID', 'nobody@localhost')
app.otp_secret   = os.environ.get('OTP_SECRET') or None
app.inline_qr    = os.environ.get('OTP_INLINE_QR', '').lower() in ('1', 'true', 'yes')
app.listen_host  = os.environ.get('OTP_HOST', 'localhost')
app.listen_port  = int(os.environ.get('OTP_PORT', 8080))

app.keys         = KeyStore(app.issuer)
