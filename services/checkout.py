import logging
import math
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

import config
from exceptions.cart import EmptyCartException, BadLinesException, InvalidShippingFeeException
from models.cart import CartLineDTO, DiscountCodesDTO, OrderTotalsDTO
from repositories.influence_cap import InfluenceCapRepository
from repositories.product import ProductRepository
from services.discount_context import DiscountContextService
from services.pricing import PricingService
from utils.clock import utc_now

logger = logging.getLogger(__name__)


class CheckoutService:
    """Computes authoritative cart totals from untrusted client input."""

    @staticmethod
    def parse_lines(raw_lines: Any) -> list[CartLineDTO]:
        """
        Validate client cart lines.

        Each line must carry a non-empty ``product_id`` and an integer ``qty``
        between 1 and config.MAX_LINE_QTY (integral floats and digit strings
        are accepted).

        Args:
            raw_lines: List of dicts, objects with attributes, or CartLineDTO

        Returns:
            Lines in input order

        Raises:
            EmptyCartException: No lines
            BadLinesException: First invalid line
        """
        if not raw_lines or not isinstance(raw_lines, (list, tuple)):
            raise EmptyCartException()

        lines = []
        for index, raw_line in enumerate(raw_lines):
            if isinstance(raw_line, CartLineDTO):
                lines.append(raw_line)
                continue

            if isinstance(raw_line, dict):
                product_id = raw_line.get("product_id")
                qty = raw_line.get("qty", raw_line.get("quantity"))
            else:
                product_id = getattr(raw_line, "product_id", None)
                qty = getattr(raw_line, "qty", getattr(raw_line, "quantity", None))

            if product_id is None or not str(product_id).strip():
                raise BadLinesException(line_index=index, reason="missing product_id")

            parsed_qty = CheckoutService._parse_quantity(qty)
            if parsed_qty is None:
                raise BadLinesException(
                    line_index=index,
                    reason=f"quantity must be an integer between 1 and {config.MAX_LINE_QTY}, got {qty!r}"
                )

            lines.append(CartLineDTO(product_id=str(product_id).strip(), qty=parsed_qty))

        return lines

    @staticmethod
    def _parse_quantity(qty: Any) -> int | None:
        if isinstance(qty, bool) or qty is None:
            return None
        if isinstance(qty, float):
            if not math.isfinite(qty) or not qty.is_integer():
                return None
            qty = int(qty)
        elif isinstance(qty, str):
            qty = qty.strip()
            # Length check first: int() refuses very long digit strings
            if not qty.isdecimal() or len(qty) > len(str(config.MAX_LINE_QTY)):
                return None
            qty = int(qty)
        elif not isinstance(qty, int):
            return None
        return qty if 0 < qty <= config.MAX_LINE_QTY else None

    @staticmethod
    def parse_shipping_fee(shipping_fee: Any) -> float:
        """
        Validate the shipping fee. None means no shipping fee.

        Raises:
            InvalidShippingFeeException: Fee is negative, not finite or not a number
        """
        if shipping_fee is None:
            return 0.0
        if isinstance(shipping_fee, bool):
            raise InvalidShippingFeeException(shipping_fee)
        try:
            fee = float(shipping_fee)
        except (TypeError, ValueError):
            raise InvalidShippingFeeException(shipping_fee)
        if not math.isfinite(fee) or fee < 0:
            raise InvalidShippingFeeException(shipping_fee)
        return fee

    @staticmethod
    async def compute_totals(
        lines: Any,
        shipping_fee: Any,
        discount_codes: DiscountCodesDTO | None,
        session: Session | AsyncSession,
        now: datetime | None = None
    ) -> OrderTotalsDTO:
        """
        Compute order totals for a cart.

        Used both to preview a cart and to price an order at placement time; both
        calls must go through here so they agree.

        Steps:
        1. Validate lines and shipping fee
        2. Load trusted price facts for the cart products
        3. Load per-product caps
        4. Resolve the discount context (promo beats referral)
        5. Run the pricing engine

        Args:
            lines: Raw cart lines from the client
            shipping_fee: Shipping fee from the client
            discount_codes: Promo/referral codes of the shopper
            session: Database session
            now: Evaluation instant (default: current time)

        Returns:
            OrderTotalsDTO

        Raises:
            EmptyCartException, BadLinesException, InvalidShippingFeeException,
            ProductNotFoundException, UnpublishedItemException, MixedCurrencyException
        """
        if now is None:
            now = utc_now()

        cart_lines = CheckoutService.parse_lines(lines)
        fee = CheckoutService.parse_shipping_fee(shipping_fee)

        product_ids = list(dict.fromkeys(line.product_id for line in cart_lines))
        logger.info(f"[Checkout] compute_totals called with {len(cart_lines)} lines, {len(product_ids)} products")

        products = await ProductRepository.get_price_facts(product_ids, session)
        products_by_id = {product.id: product for product in products}

        # Fail on catalog problems before any further reads
        PricingService.validate_catalog(cart_lines, products_by_id)

        caps = await InfluenceCapRepository.get_caps(product_ids, session)
        caps_by_id = {cap.product_id: cap.cap_percent for cap in caps}

        context = await DiscountContextService.resolve(discount_codes, now, session)

        totals = PricingService.price_cart(
            lines=cart_lines,
            products=products_by_id,
            caps=caps_by_id,
            context=context,
            shipping_fee=fee,
            now=now
        )

        logger.info(
            f"[Checkout] Totals: subtotal={totals.subtotal} discount={totals.discount_total} "
            f"total={totals.total} {totals.currency} (context={totals.applied.type.value if totals.applied else 'none'})"
        )
        return totals
