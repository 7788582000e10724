import logging
from datetime import datetime

import config
from exceptions.cart import BadLinesException, MixedCurrencyException
from exceptions.product import ProductNotFoundException, UnpublishedItemException
from models.cart import CartLineDTO, LineResultDTO, OrderTotalsDTO
from models.discount_context import DiscountContext
from models.product import ProductPriceFactsDTO
from services.discount_context import DiscountContextService
from utils.clock import is_within_window, utc_now
from utils.money import round_money

logger = logging.getLogger(__name__)


class PricingService:
    """
    Pure pricing engine shared by cart preview and order placement.

    Nothing here reads from the database or the clock implicitly: products, caps,
    the discount context and ``now`` are all passed in, so two calls with the
    same inputs return identical totals.
    """

    @staticmethod
    def effective_unit_price(product: ProductPriceFactsDTO, now: datetime) -> float:
        """
        Resolve the unit price to charge for a product.

        The sale price applies when it is set and ``now`` lies inside
        [sale_starts_at, sale_ends_at], both bounds inclusive and a missing bound
        open on that side. Otherwise the base price applies; a missing base price
        prices the product at 0.

        Example:
            base 100, sale 80 from 2024-01-01 to 2024-01-31
            now 2024-01-15 -> 80.0
            now 2024-02-01 -> 100.0
        """
        if product.sale_price is not None and is_within_window(now, product.sale_starts_at, product.sale_ends_at):
            return product.sale_price
        if product.base_price is None:
            return 0.0
        return product.base_price

    @staticmethod
    def preview_line(
        product: ProductPriceFactsDTO,
        qty: int,
        context: DiscountContext | None,
        cap_percent: float | None = None,
        now: datetime | None = None,
        line_index: int = 0
    ) -> LineResultDTO:
        """
        Price a single line.

        Args:
            product: Trusted price facts of the product
            qty: Quantity (positive integer)
            context: Active discount context, or None
            cap_percent: Cap on discount + commission for this product (default: config.DEFAULT_CAP_PERCENT)
            now: Evaluation instant for the sale window (default: current time)
            line_index: Position of the line in the cart, reported on errors

        Returns:
            LineResultDTO; amounts rounded half-up to the product currency's minor unit

        Raises:
            BadLinesException: qty is not an integer between 1 and config.MAX_LINE_QTY
        """
        if isinstance(qty, bool) or not isinstance(qty, int) or not 0 < qty <= config.MAX_LINE_QTY:
            raise BadLinesException(
                line_index=line_index,
                reason=f"quantity must be an integer between 1 and {config.MAX_LINE_QTY}, got {qty!r}"
            )
        if now is None:
            now = utc_now()
        if cap_percent is None:
            cap_percent = config.DEFAULT_CAP_PERCENT

        unit_price = PricingService.effective_unit_price(product, now)
        line_subtotal = round_money(unit_price * qty, product.currency)

        discount_pct, commission_pct = 0.0, 0.0
        eligible = DiscountContextService.is_line_eligible(context, product)
        if eligible:
            requested_discount, requested_commission = DiscountContextService.requested_percentages(context)
            discount_pct, commission_pct = DiscountContextService.clamp_percentages(
                requested_discount, requested_commission, cap_percent
            )

        return LineResultDTO(
            product_id=product.id,
            qty=qty,
            unit_price=unit_price,
            line_subtotal=line_subtotal,
            discount_applied=eligible,
            effective_discount_pct=discount_pct,
            effective_commission_pct=commission_pct,
            line_discount=round_money(line_subtotal * discount_pct / 100, product.currency),
            line_commission=round_money(line_subtotal * commission_pct / 100, product.currency),
        )

    @staticmethod
    def validate_catalog(
        lines: list[CartLineDTO],
        products: dict[str, ProductPriceFactsDTO]
    ) -> str:
        """
        Check that every cart product exists, is published and shares one currency.

        Products are checked in cart order; the first line's product sets the
        reference currency.

        Returns:
            The cart currency

        Raises:
            ProductNotFoundException: Some products are missing from the catalog
            UnpublishedItemException: A product is not published
            MixedCurrencyException: Products are priced in different currencies
        """
        missing = []
        for line in lines:
            if line.product_id not in products and line.product_id not in missing:
                missing.append(line.product_id)
        if missing:
            raise ProductNotFoundException(product_ids=missing)

        currency = None
        for line in lines:
            product = products[line.product_id]
            if not product.is_published:
                raise UnpublishedItemException(product_id=product.id)
            if currency is None:
                currency = product.currency
            elif product.currency != currency:
                raise MixedCurrencyException(expected=currency, found=product.currency, product_id=product.id)

        return currency or config.DEFAULT_CURRENCY

    @staticmethod
    def price_cart(
        lines: list[CartLineDTO],
        products: dict[str, ProductPriceFactsDTO],
        caps: dict[str, float],
        context: DiscountContext | None,
        shipping_fee: float,
        now: datetime
    ) -> OrderTotalsDTO:
        """
        Compute order totals for validated cart lines.

        Lines are priced in input order. subtotal, discount_total and
        commission_total are accumulated as rounded running sums of the rounded
        line amounts (round each step, never sum-then-round), and

            total = round(subtotal + shipping_fee - discount_total)

        Order placement re-runs exactly this computation, so the accumulation
        order must not change.

        Args:
            lines: Cart lines (already validated)
            products: Price facts by product id
            caps: Cap percent by product id; products without an entry use config.DEFAULT_CAP_PERCENT
            context: Active discount context, or None
            shipping_fee: Shipping fee (non-negative)
            now: Evaluation instant for sale windows

        Returns:
            OrderTotalsDTO including per-line results

        Raises:
            ProductNotFoundException, UnpublishedItemException, MixedCurrencyException,
            BadLinesException
        """
        currency = PricingService.validate_catalog(lines, products)

        subtotal = 0.0
        discount_total = 0.0
        commission_total = 0.0
        line_results = []

        for index, line in enumerate(lines):
            product = products[line.product_id]
            line_result = PricingService.preview_line(
                product=product,
                qty=line.qty,
                context=context,
                cap_percent=caps.get(product.id, config.DEFAULT_CAP_PERCENT),
                now=now,
                line_index=index
            )
            subtotal = round_money(subtotal + line_result.line_subtotal, currency)
            discount_total = round_money(discount_total + line_result.line_discount, currency)
            commission_total = round_money(commission_total + line_result.line_commission, currency)
            line_results.append(line_result)

        shipping_fee = round_money(shipping_fee, currency)
        total = round_money(subtotal + shipping_fee - discount_total, currency)

        logger.debug(
            f"[Pricing] {len(line_results)} lines: subtotal={subtotal} shipping={shipping_fee} "
            f"discount={discount_total} commission={commission_total} total={total} {currency}"
        )

        return OrderTotalsDTO(
            currency=currency,
            subtotal=subtotal,
            shipping_fee=shipping_fee,
            discount_total=discount_total,
            total=total,
            commission_total=commission_total,
            applied=DiscountContextService.summarize(context),
            lines=line_results,
        )
