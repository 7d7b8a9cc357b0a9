import pytest


@pytest.fixture(autouse=True)
def use_stubs_for_tests(settings):
    """Run every test against in-process collaborators in central mode."""
    settings.USE_HTTP_ADAPTERS = False
    settings.PAYMENT_ROUTING_MODE = "central"
    settings.PAYMENT_GATEWAY_NAME = "ogone"
    settings.PAYMENT_GATEWAY_ADAPTER = "apps.payments.adapters.GatewayStub"


@pytest.fixture(autouse=True)
def reset_checkout_circuit():
    from apps.payments.http_adapters import _checkout_cb

    _checkout_cb.on_success()
    yield
    _checkout_cb.on_success()
