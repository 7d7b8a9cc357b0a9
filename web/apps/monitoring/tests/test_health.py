import pytest


@pytest.mark.django_db
def test_health_ok(client, settings):
    settings.DEBUG = True
    r = client.get("/health/")
    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    assert body["components"]["payments"] == {"ok": True, "routing_mode": "central", "gateway": "ogone"}


@pytest.mark.django_db
def test_health_refuses_stub_gateway_outside_debug(client, settings):
    settings.DEBUG = False
    r = client.get("/health/")
    assert r.status_code == 503
    payments = r.json()["components"]["payments"]
    assert payments["ok"] is False
    assert payments["detail"] == "GATEWAY_STUB_ACTIVE"


@pytest.mark.django_db
def test_health_reports_bad_routing_mode(client, settings):
    settings.PAYMENT_ROUTING_MODE = "sideways"
    r = client.get("/health/")
    assert r.status_code == 503
    assert r.json()["components"]["payments"] == {"ok": False}


@pytest.mark.django_db
def test_health_reports_unknown_gateway_adapter(client, settings):
    settings.PAYMENT_GATEWAY_ADAPTER = "apps.payments.adapters.NoSuchGateway"
    r = client.get("/health/")
    assert r.status_code == 503


@pytest.mark.django_db
def test_health_reports_missing_gateway_adapter(client, settings):
    settings.DEBUG = True
    settings.PAYMENT_GATEWAY_ADAPTER = ""
    r = client.get("/health/")
    assert r.status_code == 503
    assert r.json()["components"]["payments"] == {"ok": False}
