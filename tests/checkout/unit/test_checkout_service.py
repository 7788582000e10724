"""
CheckoutService Unit Tests

Tests input validation (lines, shipping fee), error precedence and the
orchestration of catalog/cap/context readers. Readers are patched with
AsyncMock so each test controls exactly what the catalog returns.

Run with:
    pytest tests/checkout/unit/test_checkout_service.py -v
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

import config
from enums.discount_scope import DiscountScope
from exceptions import (
    BadLinesException,
    EmptyCartException,
    InvalidShippingFeeException,
    MixedCurrencyException,
    ProductNotFoundException,
    UnpublishedItemException,
)
from models.cart import CartLineDTO, DiscountCodesDTO
from models.discount_context import PromoContextDTO
from models.influence_cap import ProductCapDTO
from models.product import ProductPriceFactsDTO
from services.checkout import CheckoutService


def make_product(product_id="p1", **overrides):
    data = {"id": product_id, "base_price": 100.0, "currency": "INR", "is_published": True}
    data.update(overrides)
    return ProductPriceFactsDTO(**data)


@pytest.fixture
def readers():
    """Patch the catalog, cap and context readers used by compute_totals."""
    with patch('services.checkout.ProductRepository.get_price_facts', new_callable=AsyncMock) as get_price_facts, \
            patch('services.checkout.InfluenceCapRepository.get_caps', new_callable=AsyncMock) as get_caps, \
            patch('services.checkout.DiscountContextService.resolve', new_callable=AsyncMock) as resolve:
        get_price_facts.return_value = [make_product()]
        get_caps.return_value = []
        resolve.return_value = None
        yield MagicMock(get_price_facts=get_price_facts, get_caps=get_caps, resolve=resolve)


class TestParseLines:
    """Test CheckoutService.parse_lines()"""

    @pytest.mark.parametrize("raw", [None, [], (), "p1", {"product_id": "p1", "qty": 1}])
    def test_empty_or_not_a_list(self, raw):
        with pytest.raises(EmptyCartException):
            CheckoutService.parse_lines(raw)

    def test_accepts_dicts_and_dtos(self):
        lines = CheckoutService.parse_lines([
            {"product_id": " p1 ", "qty": 2},
            {"product_id": "p2", "quantity": "3"},
            CartLineDTO(product_id="p3", qty=1),
        ])

        assert lines == [
            CartLineDTO(product_id="p1", qty=2),
            CartLineDTO(product_id="p2", qty=3),
            CartLineDTO(product_id="p3", qty=1),
        ]

    def test_integral_float_quantity(self):
        assert CheckoutService.parse_lines([{"product_id": "p1", "qty": 2.0}])[0].qty == 2

    @pytest.mark.parametrize("qty", [0, -1, 1.5, "abc", "", None, True, float("inf")])
    def test_invalid_quantity(self, qty):
        with pytest.raises(BadLinesException) as exc_info:
            CheckoutService.parse_lines([{"product_id": "p1", "qty": 1}, {"product_id": "p2", "qty": qty}])

        assert exc_info.value.line_index == 1
        assert exc_info.value.code == "BAD_LINES"

    @pytest.mark.parametrize("product_id", [None, "", "   "])
    def test_missing_product_id(self, product_id):
        with pytest.raises(BadLinesException) as exc_info:
            CheckoutService.parse_lines([{"product_id": product_id, "qty": 1}])

        assert exc_info.value.line_index == 0

    def test_quantity_up_to_limit_accepted(self):
        lines = CheckoutService.parse_lines([
            {"product_id": "p1", "qty": config.MAX_LINE_QTY},
            {"product_id": "p2", "qty": str(config.MAX_LINE_QTY)},
        ])

        assert [line.qty for line in lines] == [config.MAX_LINE_QTY, config.MAX_LINE_QTY]

    @pytest.mark.parametrize("qty", [
        config.MAX_LINE_QTY + 1,
        10 ** 21,
        10 ** 400,
        1e21,
        "1" * 5000,
        "\u00b2",
    ])
    def test_quantity_over_limit(self, qty):
        with pytest.raises(BadLinesException) as exc_info:
            CheckoutService.parse_lines([{"product_id": "p1", "qty": qty}])

        assert exc_info.value.code == "BAD_LINES"


class TestParseShippingFee:
    """Test CheckoutService.parse_shipping_fee()"""

    @pytest.mark.parametrize("raw, expected", [(None, 0.0), (0, 0.0), (10, 10.0), ("49.5", 49.5)])
    def test_valid(self, raw, expected):
        assert CheckoutService.parse_shipping_fee(raw) == expected

    @pytest.mark.parametrize("raw", [-1, "-0.01", "free", float("nan"), float("inf"), True, [10]])
    def test_invalid(self, raw):
        with pytest.raises(InvalidShippingFeeException):
            CheckoutService.parse_shipping_fee(raw)


class TestComputeTotals:
    """Test CheckoutService.compute_totals()"""

    @pytest.mark.asyncio
    async def test_basic_totals(self, readers, now):
        totals = await CheckoutService.compute_totals(
            [{"product_id": "p1", "qty": 2}], 10, DiscountCodesDTO(), MagicMock(), now
        )

        assert totals.subtotal == 200.0
        assert totals.total == 210.0
        readers.get_price_facts.assert_awaited_once()
        assert readers.get_price_facts.await_args.args[0] == ["p1"]

    @pytest.mark.asyncio
    async def test_duplicate_products_loaded_once(self, readers, now):
        await CheckoutService.compute_totals(
            [{"product_id": "p1", "qty": 1}, {"product_id": "p1", "qty": 2}], 0, None, MagicMock(), now
        )

        assert readers.get_price_facts.await_args.args[0] == ["p1"]

    @pytest.mark.asyncio
    async def test_promo_with_cap(self, readers, now):
        readers.get_caps.return_value = [ProductCapDTO(product_id="p1", cap_percent=12.0)]
        readers.resolve.return_value = PromoContextDTO(
            id="promo-1",
            code="SAVE10",
            scope=DiscountScope.GLOBAL,
            user_discount_percent=10.0,
            commission_percent=5.0,
        )
        codes = DiscountCodesDTO(promo_code="SAVE10")

        totals = await CheckoutService.compute_totals([{"product_id": "p1", "qty": 1}], 0, codes, MagicMock(), now)

        assert totals.discount_total == 7.0
        assert totals.commission_total == 5.0
        assert readers.resolve.await_args.args[0] == codes

    @pytest.mark.asyncio
    async def test_empty_cart_reported_before_bad_shipping_fee(self, readers, now):
        with pytest.raises(EmptyCartException):
            await CheckoutService.compute_totals([], -5, None, MagicMock(), now)

    @pytest.mark.asyncio
    async def test_bad_lines_reported_before_bad_shipping_fee(self, readers, now):
        with pytest.raises(BadLinesException):
            await CheckoutService.compute_totals([{"product_id": "p1", "qty": 0}], -5, None, MagicMock(), now)

    @pytest.mark.asyncio
    async def test_bad_shipping_fee_stops_before_catalog_read(self, readers, now):
        with pytest.raises(InvalidShippingFeeException):
            await CheckoutService.compute_totals([{"product_id": "p1", "qty": 1}], "abc", None, MagicMock(), now)

        readers.get_price_facts.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("qty", [10 ** 21, 10 ** 400])
    async def test_huge_quantity_is_a_bad_line(self, readers, now, qty):
        readers.get_price_facts.return_value = [make_product(base_price=1e6)]

        with pytest.raises(BadLinesException):
            await CheckoutService.compute_totals([{"product_id": "p1", "qty": qty}], 0, None, MagicMock(), now)

        readers.get_price_facts.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_product_stops_before_caps_and_context(self, readers, now):
        readers.get_price_facts.return_value = []

        with pytest.raises(ProductNotFoundException) as exc_info:
            await CheckoutService.compute_totals([{"product_id": "ghost", "qty": 1}], 0, None, MagicMock(), now)

        assert exc_info.value.product_ids == ["ghost"]
        readers.get_caps.assert_not_awaited()
        readers.resolve.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unpublished_product(self, readers, now):
        readers.get_price_facts.return_value = [make_product(is_published=False)]

        with pytest.raises(UnpublishedItemException):
            await CheckoutService.compute_totals([{"product_id": "p1", "qty": 1}], 0, None, MagicMock(), now)

    @pytest.mark.asyncio
    async def test_mixed_currency(self, readers, now):
        readers.get_price_facts.return_value = [make_product("p1"), make_product("p2", currency="EUR")]

        with pytest.raises(MixedCurrencyException):
            await CheckoutService.compute_totals(
                [{"product_id": "p1", "qty": 1}, {"product_id": "p2", "qty": 1}], 0, None, MagicMock(), now
            )

    @pytest.mark.asyncio
    async def test_repeated_calls_agree(self, readers, now):
        lines = [{"product_id": "p1", "qty": 3}]

        first = await CheckoutService.compute_totals(lines, 4.99, None, MagicMock(), now)
        second = await CheckoutService.compute_totals(lines, 4.99, None, MagicMock(), now)

        assert first.model_dump_json() == second.model_dump_json()
