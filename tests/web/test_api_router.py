"""
API router tests.

Exercises the HTTP edge with FastAPI's TestClient: cookie handling, payload
aliases and the error-code/status mapping. Services are patched; their logic
is covered by the service tests.
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

import config
from app import app
from enums.discount_scope import DiscountScope
from enums.referral_link_type import ReferralLinkType
from exceptions import (
    CodeRequiredException,
    EmptyCartException,
    InvalidOrExpiredCodeException,
    MixedCurrencyException,
    ProductNotFoundException,
    TotalMismatchException,
)
from models.cart import DiscountCodesDTO, OrderTotalsDTO
from models.discount_context import AppliedPromoDTO, PromoContextDTO, ReferralContextDTO
from models.order import PlacedOrderDTO

TOTALS = OrderTotalsDTO(
    currency="INR",
    subtotal=200.0,
    shipping_fee=10.0,
    discount_total=20.0,
    total=190.0,
    commission_total=10.0,
)

PROMO = PromoContextDTO(
    id="promo-1",
    code="SAVE10",
    scope=DiscountScope.GLOBAL,
    user_discount_percent=10.0,
    commission_percent=5.0,
)


@pytest.fixture
def client():
    client = TestClient(app)
    yield client
    client.close()


def set_cookie_headers(response) -> list[str]:
    return response.headers.get_list("set-cookie")


class TestCalcTotals:

    @patch('web.api_router.CheckoutService.compute_totals', new_callable=AsyncMock)
    def test_returns_totals(self, mock_compute, client):
        mock_compute.return_value = TOTALS
        client.cookies.set(config.PROMO_COOKIE, "SAVE10")
        client.cookies.set(config.REF_COOKIE, "anna-store")

        response = client.post(
            "/api/checkout/calc-totals",
            json={"lines": [{"product_id": "p1", "qty": 2}], "shippingFee": 10},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is True
        assert body["total"] == 190.0
        assert body["applied"] is None
        assert body["lines"] == []

        kwargs = mock_compute.await_args.kwargs
        assert kwargs["lines"] == [{"product_id": "p1", "qty": 2}]
        assert kwargs["shipping_fee"] == 10
        assert kwargs["discount_codes"] == DiscountCodesDTO(promo_code="SAVE10", referral_code="anna-store")

    @pytest.mark.parametrize("exception, status_code, code", [
        (EmptyCartException(), 400, "EMPTY_CART"),
        (MixedCurrencyException("INR", "USD", "p2"), 400, "MIXED_CURRENCY_NOT_SUPPORTED"),
        (ProductNotFoundException(["ghost"]), 404, "PRODUCT_NOT_FOUND"),
    ])
    def test_errors(self, client, exception, status_code, code):
        with patch('web.api_router.CheckoutService.compute_totals', new_callable=AsyncMock) as mock_compute:
            mock_compute.side_effect = exception
            response = client.post("/api/checkout/calc-totals", json={"lines": []})

        assert response.status_code == status_code
        assert response.json() == {"ok": False, "error": code}

    @patch('web.api_router.CheckoutService.compute_totals', new_callable=AsyncMock)
    def test_unexpected_error(self, mock_compute, client):
        mock_compute.side_effect = RuntimeError("database is locked")

        response = client.post("/api/checkout/calc-totals", json={"lines": [{"product_id": "p1", "qty": 1}]})

        assert response.status_code == 500
        assert response.json() == {"ok": False, "error": "INTERNAL_ERROR"}


class TestPlaceOrder:

    @patch('web.api_router.OrderService.place_order', new_callable=AsyncMock)
    def test_places_order_and_clears_promo_cookie(self, mock_place, client):
        mock_place.return_value = PlacedOrderDTO(
            order_id=7,
            totals=TOTALS,
            discount_codes=DiscountCodesDTO(referral_code="anna-store"),
        )
        client.cookies.set(config.PROMO_COOKIE, "SAVE10")

        response = client.post(
            "/api/orders/place",
            json={"lines": [{"product_id": "p1", "qty": 2}], "shippingFee": 10, "expectedTotal": 190},
        )

        assert response.status_code == 200
        assert response.json()["order_id"] == 7
        assert response.json()["summary"]["total"] == 190.0
        assert mock_place.await_args.kwargs["expected_total"] == 190.0

        cookies = set_cookie_headers(response)
        assert any(c.startswith(f"{config.PROMO_COOKIE}=") and "Max-Age=0" in c for c in cookies)
        assert not any(c.startswith(f"{config.REF_COOKIE}=") for c in cookies)

    @patch('web.api_router.OrderService.place_order', new_callable=AsyncMock)
    def test_total_mismatch(self, mock_place, client):
        mock_place.side_effect = TotalMismatchException(expected_total=150.0, actual_total=190.0)

        response = client.post("/api/orders/place", json={"lines": [{"product_id": "p1", "qty": 2}]})

        assert response.status_code == 409
        assert response.json() == {"ok": False, "error": "TOTAL_MISMATCH"}


class TestPromoRoutes:

    @patch('web.api_router.PromoService.apply_promo', new_callable=AsyncMock)
    def test_apply_sets_cookie(self, mock_apply, client):
        mock_apply.return_value = AppliedPromoDTO(promo=PROMO, discount_codes=DiscountCodesDTO(promo_code="SAVE10"))

        response = client.post("/api/promo/apply", json={"code": "save10"})

        assert response.status_code == 200
        assert response.json()["ok"] is True
        assert response.json()["promo"]["code"] == "SAVE10"
        assert response.json()["promo"]["scope"] == "global"
        assert mock_apply.await_args.kwargs["code"] == "save10"

        promo_cookie = next(c for c in set_cookie_headers(response) if c.startswith(f"{config.PROMO_COOKIE}="))
        assert promo_cookie.startswith(f"{config.PROMO_COOKIE}=SAVE10")
        assert "HttpOnly" in promo_cookie
        assert f"Max-Age={config.ATTRIBUTION_DAYS * 86400}" in promo_cookie

    @pytest.mark.parametrize("exception, status_code, code", [
        (CodeRequiredException(), 400, "CODE_REQUIRED"),
        (InvalidOrExpiredCodeException("NOPE"), 404, "INVALID_OR_EXPIRED"),
    ])
    def test_apply_errors(self, client, exception, status_code, code):
        with patch('web.api_router.PromoService.apply_promo', new_callable=AsyncMock) as mock_apply:
            mock_apply.side_effect = exception
            response = client.post("/api/promo/apply", json={"code": "NOPE"})

        assert response.status_code == status_code
        assert response.json() == {"ok": False, "error": code}
        assert not set_cookie_headers(response)

    def test_clear_deletes_promo_cookie(self, client):
        client.cookies.set(config.PROMO_COOKIE, "SAVE10")

        response = client.post("/api/promo/clear")

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        assert any(
            c.startswith(f"{config.PROMO_COOKIE}=") and "Max-Age=0" in c for c in set_cookie_headers(response)
        )


class TestReferralLanding:

    @patch('web.api_router.ReferralLinkRepository.resolve', new_callable=AsyncMock)
    def test_product_link_redirects_to_product(self, mock_resolve, client):
        mock_resolve.return_value = ReferralContextDTO(
            code="anna-serum", link_type=ReferralLinkType.PRODUCT, product_id="p1"
        )

        response = client.get("/r/anna-serum", follow_redirects=False)

        assert response.status_code == 307
        assert response.headers["location"] == "/product/p1"
        assert any(c.startswith(f"{config.REF_COOKIE}=anna-serum") for c in set_cookie_headers(response))

    @patch('web.api_router.ReferralLinkRepository.resolve', new_callable=AsyncMock)
    def test_unknown_code_still_remembered(self, mock_resolve, client):
        mock_resolve.return_value = None

        response = client.get("/r/someone", follow_redirects=False)

        assert response.headers["location"] == "/"
        assert any(c.startswith(f"{config.REF_COOKIE}=someone") for c in set_cookie_headers(response))


class TestAppWiring:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_security_headers(self, client):
        response = client.get("/health")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"

    @patch('web.api_router.CheckoutService.compute_totals', new_callable=AsyncMock)
    def test_api_responses_not_cached(self, mock_compute, client):
        mock_compute.return_value = TOTALS

        response = client.post("/api/checkout/calc-totals", json={"lines": [{"product_id": "p1", "qty": 1}]})

        assert response.headers["Cache-Control"] == "no-store"
