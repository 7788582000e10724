import logging
import math
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_commit, session_rollback
from enums.discount_context_type import DiscountContextType
from enums.order_status import OrderStatus
from exceptions.order import TotalMismatchException
from models.cart import DiscountCodesDTO, OrderTotalsDTO
from models.order import OrderDTO, PlacedOrderDTO
from models.orderItem import OrderItemDTO
from models.order_attribution import OrderAttributionDTO, OrderAttributionItemDTO
from repositories.order import OrderRepository, OrderItemRepository
from repositories.order_attribution import OrderAttributionRepository
from repositories.promo_code import PromoCodeRepository
from services.checkout import CheckoutService
from services.promo import PromoService
from utils.clock import utc_now
from utils.money import round_money

logger = logging.getLogger(__name__)


class OrderService:

    @staticmethod
    async def place_order(
        lines: Any,
        shipping_fee: Any,
        discount_codes: DiscountCodesDTO | None,
        session: Session | AsyncSession,
        user_id: str | None = None,
        expected_total: Any = None,
        now: datetime | None = None
    ) -> PlacedOrderDTO:
        """
        Create an order priced by the server.

        The totals are recomputed with CheckoutService.compute_totals instead of
        trusting what the client was shown. Order items and attribution rows are
        copied from the same line results, so they always add up to the order totals.

        Args:
            lines: Raw cart lines from the client
            shipping_fee: Shipping fee from the client
            discount_codes: Promo/referral codes of the shopper
            session: Database session (committed on success, rolled back on failure)
            user_id: Identity provider user id, None for guest checkout
            expected_total: Total shown to the shopper; must match the recomputed total
            now: Evaluation instant (default: current time)

        Returns:
            PlacedOrderDTO; its discount_codes have the promo cleared and the referral kept

        Raises:
            PricingInputException subclasses: Invalid cart
            TotalMismatchException: expected_total is not a number or differs from the recomputed total
        """
        if now is None:
            now = utc_now()

        totals = await CheckoutService.compute_totals(lines, shipping_fee, discount_codes, session, now)

        if expected_total is not None:
            expected = OrderService._parse_expected_total(expected_total, totals.currency)
            if expected != totals.total:
                logger.warning(f"[Order] Total mismatch: shown {expected_total!r}, recomputed {totals.total}")
                raise TotalMismatchException(expected_total=expected, actual_total=totals.total)

        try:
            order_id = await OrderRepository.create(OrderDTO(
                user_id=user_id,
                status=OrderStatus.PENDING_PAYMENT,
                currency=totals.currency,
                subtotal=totals.subtotal,
                shipping_fee=totals.shipping_fee,
                discount_total=totals.discount_total,
                commission_total=totals.commission_total,
                total=totals.total,
                promo_code=totals.applied.code if totals.applied and totals.applied.type == DiscountContextType.PROMO else None,
                referral_code=discount_codes.referral_code if discount_codes else None,
            ), session)

            # Unit price comes from the pricing engine (sale-aware), never re-derived here
            await OrderItemRepository.create_many([
                OrderItemDTO(
                    order_id=order_id,
                    product_id=line.product_id,
                    quantity=line.qty,
                    unit_price=line.unit_price,
                    line_subtotal=line.line_subtotal,
                    line_discount=line.line_discount,
                )
                for line in totals.lines
            ], session)

            await OrderService._create_attribution(order_id, totals, session, now)

            await session_commit(session)
        except Exception:
            await session_rollback(session)
            raise

        logger.info(f"[Order] Order {order_id} placed: total={totals.total} {totals.currency}")

        return PlacedOrderDTO(
            order_id=order_id,
            totals=totals,
            discount_codes=PromoService.clear_promo(discount_codes)
        )

    @staticmethod
    def _parse_expected_total(expected_total: Any, currency: str) -> float | None:
        """Round the shown total to the order currency; None when it is not a finite number."""
        if isinstance(expected_total, bool):
            return None
        try:
            expected = float(expected_total)
        except (TypeError, ValueError):
            return None
        if not math.isfinite(expected):
            return None
        return round_money(expected, currency)

    @staticmethod
    async def _create_attribution(
        order_id: int,
        totals: OrderTotalsDTO,
        session: Session | AsyncSession,
        now: datetime
    ) -> int | None:
        """
        Record which influencer the order is attributed to.

        Only orders priced under a context that names an influencer are attributed.
        One attribution item is written per discounted line, carrying that line's
        effective percentages and amounts.
        """
        applied = totals.applied
        if applied is None or not applied.influencer_id:
            return None

        promo_code_id = None
        if applied.type == DiscountContextType.PROMO:
            promo = await PromoCodeRepository.resolve(applied.code, now, session)
            promo_code_id = promo.id if promo else None

        items = [
            OrderAttributionItemDTO(
                order_id=order_id,
                influencer_id=applied.influencer_id,
                product_id=line.product_id,
                qty=line.qty,
                unit_price=line.unit_price,
                currency=totals.currency,
                effective_user_discount_pct=line.effective_discount_pct,
                effective_commission_pct=line.effective_commission_pct,
                discount_amount=line.line_discount,
                commission_amount=line.line_commission,
            )
            for line in totals.lines
            if line.discount_applied
        ]

        attribution_id = await OrderAttributionRepository.create(OrderAttributionDTO(
            order_id=order_id,
            influencer_id=applied.influencer_id,
            attributed_by=applied.type,
            promo_code_id=promo_code_id,
            code=applied.code,
            user_discount_total=totals.discount_total,
            commission_total=totals.commission_total,
            currency=totals.currency,
            items=items,
        ), session)

        logger.info(
            f"[Order] Order {order_id} attributed to influencer {applied.influencer_id} "
            f"via {applied.type.value} ({len(items)} lines, commission={totals.commission_total})"
        )
        return attribution_id
