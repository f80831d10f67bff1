"""Import smoke test for the application factory."""


def test_import_app():
    """The factory builds an app exposing the RPC operations."""
    from guided_tours.main import create_app
    app = create_app()
    assert app is not None

    paths = app.openapi()["paths"]
    assert "/v1/execution/proximity" in paths
    assert "/v1/cart/checkout" in paths
    assert "/v1/health/ping" in paths
