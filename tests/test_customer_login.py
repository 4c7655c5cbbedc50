from datetime import timedelta
import pytest
from storefront.auth.constants import COOKIE_MAX_AGE_SECONDS, COOKIE_NAME
from storefront.config.settings import config_settings
from storefront.auth.session import get_session_codec
from tests.helpers import add_order, make_id_token, url_prefix

LOGIN = f"{url_prefix}/customer/login"


async def test_login_sets_session_cookie(ac_client):
    order = await add_order(phone="090-1234-5678", pin="4321")

    resp = await ac_client.post(LOGIN, json={"phone": "(090) 1234 5678", "pin": "4321"})
    assert resp.status_code == 200
    assert resp.json() == {"ok": True, "orderId": order.id, "request_id": resp.headers["X-Request-ID"]}

    set_cookie = resp.headers["set-cookie"].lower()
    assert f"{COOKIE_NAME}=" in set_cookie
    assert "httponly" in set_cookie
    assert "samesite=lax" in set_cookie
    assert "max-age=604800" in set_cookie

    claims = get_session_codec().verify(ac_client.cookies.get(COOKIE_NAME))
    assert claims.order_id == order.id
    assert claims.phone == "09012345678"
    assert claims.phone_hash is not None
    assert (claims.expires_at_ms - claims.issued_at_ms) // 1000 == COOKIE_MAX_AGE_SECONDS


async def test_login_picks_latest_order_for_phone(ac_client):
    await add_order(age=timedelta(days=3))
    latest = await add_order(age=timedelta(hours=1))

    resp = await ac_client.post(LOGIN, json={"phone": "09012345678", "pin": "1234"})
    assert resp.json()["orderId"] == latest.id


async def test_legacy_order_without_phone_hash(ac_client):
    order = await add_order(with_phone_hash=False)
    await ac_client.post(LOGIN, json={"phone": "09012345678", "pin": "1234"})
    claims = get_session_codec().verify(ac_client.cookies.get(COOKIE_NAME))
    assert claims.order_id == order.id
    assert claims.phone_hash is None


async def test_wrong_pin(ac_client):
    await add_order(pin="1234")
    resp = await ac_client.post(LOGIN, json={"phone": "09012345678", "pin": "9999"})
    assert resp.status_code == 401
    assert COOKIE_NAME not in ac_client.cookies


async def test_unknown_phone(ac_client):
    resp = await ac_client.post(LOGIN, json={"phone": "09087654321", "pin": "1234"})
    assert resp.status_code == 404


@pytest.mark.parametrize("payload, code", [
    ({"phone": "", "pin": "1234"}, "MISSING_CREDENTIALS"),
    ({"phone": "09012345678", "pin": ""}, "MISSING_CREDENTIALS"),
    ({"phone": "09012345678", "pin": "12a4"}, "INVALID_PIN"),
    ({"phone": "09012345678", "pin": "12345"}, "INVALID_PIN"),
    ({"phone": "1234", "pin": "1234"}, "INVALID_PHONE"),
    ({"phone": "09012345678"}, "BAD_REQUEST"),
])
async def test_login_input_validation(ac_client, payload, code):
    resp = await ac_client.post(LOGIN, json=payload)
    assert resp.status_code == 400
    assert resp.json()["ok"] is False
    assert resp.json()["error"]["code"] == code


async def test_federated_login(ac_client):
    order = await add_order(federated_uid="google-uid-1")

    resp = await ac_client.post(f"{url_prefix}/customer/login-federated",
                                json={"idToken": make_id_token("google-uid-1", email="aiko@example.com")})
    assert resp.status_code == 200
    assert resp.json()["orderId"] == order.id
    assert get_session_codec().verify(ac_client.cookies.get(COOKIE_NAME)).order_id == order.id


async def test_federated_login_rejects_bad_token(ac_client):
    await add_order(federated_uid="google-uid-1")
    resp = await ac_client.post(f"{url_prefix}/customer/login-federated",
                                json={"idToken": make_id_token("google-uid-1", key="wrong-key-0123456789abcdef")})
    assert resp.status_code == 401


@pytest.mark.parametrize("id_token", ["not-a-jwt", "a.b", "a..c", "a.b.c.d", "a.b.c."])
async def test_federated_login_rejects_malformed_token(ac_client, id_token):
    resp = await ac_client.post(f"{url_prefix}/customer/login-federated", json={"idToken": id_token})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "MALFORMED_TOKEN"
    assert COOKIE_NAME not in ac_client.cookies


async def test_federated_login_without_linked_order(ac_client):
    resp = await ac_client.post(f"{url_prefix}/customer/login-federated",
                                json={"idToken": make_id_token("google-uid-2")})
    assert resp.status_code == 404


async def test_logout_clears_cookie(ac_client):
    await add_order()
    await ac_client.post(LOGIN, json={"phone": "09012345678", "pin": "1234"})
    assert COOKIE_NAME in ac_client.cookies

    resp = await ac_client.post(f"{url_prefix}/customer/logout")
    assert resp.status_code == 200
    assert resp.json()["ok"] is True
    assert COOKIE_NAME not in ac_client.cookies
    assert (await ac_client.get(f"{url_prefix}/customer/messages")).status_code == 401


def test_cookie_lifetime_follows_session_ttl_setting():
    assert COOKIE_MAX_AGE_SECONDS == config_settings.SESSION_TTL_DAYS * 24 * 3600
