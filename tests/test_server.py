import pytest

import main
from app import app
from knownids import KeyStore, time_counter

SECRET = "HEEKUKXMSYMV2B26"


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(app, "keys", KeyStore("acme"), raising=False)
    monkeypatch.setattr(app, "otp_id", "robby", raising=False)
    monkeypatch.setattr(app, "otp_secret", SECRET, raising=False)
    monkeypatch.setattr(app, "inline_qr", False, raising=False)
    monkeypatch.setattr(main, "time_counter", lambda: 56019269)
    main.init_keys()
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


def test_index_shows_codes(client):
    response = client.get('/')
    assert response.status_code == 200
    html = response.get_data(as_text=True)
    assert "Issuer: acme" in html
    assert "ID: robby" in html
    assert "[ Secret: HEEKUKXMSYMV2B26 ]" in html
    assert "This: 133 968" in html
    assert 'src="qr.png"' in html


def test_index_html_alias(client):
    assert client.get('/index.html').status_code == 200


def test_qr_png(client):
    response = client.get('/qr.png')
    assert response.status_code == 200
    assert response.mimetype == 'image/png'
    assert response.data.startswith(b"\x89PNG")


def test_inline_qr(client, monkeypatch):
    monkeypatch.setattr(app, "inline_qr", True)
    html = client.get('/').get_data(as_text=True)
    assert 'src="data:image/png;base64,' in html


def test_unknown_path(client):
    assert client.get('/nothing').status_code == 404


def test_unknown_identity(client, monkeypatch):
    monkeypatch.setattr(app, "otp_id", "ghost")
    assert client.get('/').status_code == 404
    assert client.get('/qr.png').status_code == 404


def test_verify(client):
    code = app.keys.code("robby", time_counter())
    assert client.post('/verify', data={'code': f"{code:06d}"}).get_json() == {'valid': True}
    assert client.post('/verify', data={'code': "abc"}).get_json() == {'valid': False}


def test_generated_key_when_no_secret(monkeypatch):
    monkeypatch.setattr(app, "keys", KeyStore("acme"))
    monkeypatch.setattr(app, "otp_id", "robby")
    monkeypatch.setattr(app, "otp_secret", None)
    main.init_keys()
    assert "robby" in app.keys
