import json

from fastapi.testclient import TestClient

from checkout_api.bootstrap import build_app
from checkout_api.config import Settings


def test_app_serves_products_from_configured_catalog(tmp_path):
    catalog = tmp_path / "products.json"
    catalog.write_text(
        json.dumps(
            [
                {
                    "id": "mug",
                    "name": "Mug",
                    "unitAmount": {"currencyCode": "USD", "value": "12.00"},
                }
            ]
        ),
        encoding="utf-8",
    )
    settings = Settings(
        paypal_client_id="id", paypal_client_secret="secret", catalog_path=catalog
    )

    with TestClient(build_app(settings)) as client:
        res = client.get("/api/products/mug")
        missing = client.get("/api/products/nope")

    assert res.status_code == 200
    assert res.json()["unitAmount"] == {"currencyCode": "USD", "value": "12.00"}
    assert missing.status_code == 404


def test_missing_product_never_reaches_paypal(tmp_path):
    catalog = tmp_path / "products.json"
    catalog.write_text("[]", encoding="utf-8")

    with TestClient(build_app(Settings(catalog_path=catalog))) as client:
        res = client.post("/api/orders", json={"cart": [{"id": "ghost", "quantity": 1}]})

    assert res.status_code == 500
    assert res.json() == {"error": "Failed to create order."}
