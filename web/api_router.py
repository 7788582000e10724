"""
API router for checkout pricing, order placement and promo codes.

Discount codes travel in HTTP-only cookies. This module is the only place that
reads or writes them; services receive them as an explicit DiscountCodesDTO.

Every error response has the shape {"ok": false, "error": "<CODE>"}, with the
status code from utils.error_handler.
"""

import logging
import uuid
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel, ConfigDict, Field

import config
from db import get_db_session
from enums.referral_link_type import ReferralLinkType
from exceptions.base import StorefrontException
from models.cart import DiscountCodesDTO
from repositories.referral_link import ReferralLinkRepository
from services.checkout import CheckoutService
from services.order import OrderService
from services.promo import PromoService
from utils.clock import utc_now
from utils.error_handler import handle_service_error

logger = logging.getLogger(__name__)

api_router = APIRouter(prefix="/api", tags=["api"])
referral_router = APIRouter(tags=["referral"])


def generate_correlation_id() -> str:
    """Generate unique correlation ID for request tracing."""
    return f"{datetime.now().strftime('%Y%m%d-%H%M%S')}-{uuid.uuid4().hex[:8]}"


class CartPayload(BaseModel):
    """
    Cart submitted by the client.

    Fields are loosely typed on purpose: lines and fee are validated by
    CheckoutService so that bad input maps to EMPTY_CART / BAD_LINES /
    BAD_SHIPPING_FEE instead of a generic 422.
    """
    model_config = ConfigDict(populate_by_name=True)

    lines: Any = None
    shipping_fee: Any = Field(default=None, alias="shippingFee")


class PlaceOrderPayload(CartPayload):
    expected_total: float | None = Field(default=None, alias="expectedTotal")


class ApplyPromoPayload(BaseModel):
    code: str | None = None


def read_discount_codes(request: Request) -> DiscountCodesDTO:
    return DiscountCodesDTO(
        promo_code=request.cookies.get(config.PROMO_COOKIE) or None,
        referral_code=request.cookies.get(config.REF_COOKIE) or None,
    )


def set_code_cookie(response: JSONResponse | RedirectResponse, name: str, value: str) -> None:
    response.set_cookie(
        key=name,
        value=value,
        max_age=config.ATTRIBUTION_DAYS * 24 * 60 * 60,
        path="/",
        httponly=True,
        secure=config.COOKIE_SECURE,
        samesite="lax",
    )


def error_response(correlation_id: str, exc: StorefrontException) -> JSONResponse:
    status_code, body = handle_service_error(exc)
    logger.info(f"[{correlation_id}] Rejected with {exc.code} ({status_code}): {exc.message}")
    return JSONResponse(status_code=status_code, content=body)


def internal_error_response(correlation_id: str) -> JSONResponse:
    logger.error(f"[{correlation_id}] Unexpected error", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"ok": False, "error": StorefrontException.code}
    )


@api_router.post("/checkout/calc-totals")
async def calc_totals(request: Request, payload: CartPayload):
    """
    Preview the totals of a cart.

    Request Body:
        {"lines": [{"product_id": "p1", "qty": 2}], "shippingFee": 49}

    Returns:
        200: {"ok": true, "currency": ..., "subtotal": ..., "shipping_fee": ...,
              "discount_total": ..., "total": ..., "commission_total": ...,
              "applied": {...} | null, "lines": [...]}
        400: EMPTY_CART, BAD_LINES, BAD_SHIPPING_FEE, UNPUBLISHED_ITEM, MIXED_CURRENCY_NOT_SUPPORTED
        404: PRODUCT_NOT_FOUND
    """
    correlation_id = generate_correlation_id()
    discount_codes = read_discount_codes(request)

    async with get_db_session() as session:
        try:
            totals = await CheckoutService.compute_totals(
                lines=payload.lines,
                shipping_fee=payload.shipping_fee,
                discount_codes=discount_codes,
                session=session,
                now=utc_now()
            )
        except StorefrontException as e:
            return error_response(correlation_id, e)
        except Exception:
            return internal_error_response(correlation_id)

    return JSONResponse(content={"ok": True, **totals.model_dump(mode="json")})


@api_router.post("/orders/place")
async def place_order(request: Request, payload: PlaceOrderPayload):
    """
    Place an order priced by the server.

    The totals are recomputed exactly like /checkout/calc-totals. When the client
    sends expectedTotal and it no longer matches (prices or codes changed since
    the preview), the order is refused with 409 TOTAL_MISMATCH.

    On success the promo cookie is deleted; the referral cookie stays.

    Returns:
        200: {"ok": true, "order_id": 123, "summary": {...totals...}}
        400/404: Same codes as /checkout/calc-totals
        409: TOTAL_MISMATCH
    """
    correlation_id = generate_correlation_id()
    discount_codes = read_discount_codes(request)
    logger.info(f"[{correlation_id}] Processing order placement")

    async with get_db_session() as session:
        try:
            placed = await OrderService.place_order(
                lines=payload.lines,
                shipping_fee=payload.shipping_fee,
                discount_codes=discount_codes,
                session=session,
                expected_total=payload.expected_total,
                now=utc_now()
            )
        except StorefrontException as e:
            return error_response(correlation_id, e)
        except Exception:
            return internal_error_response(correlation_id)

    logger.info(f"[{correlation_id}] ✅ Order {placed.order_id} placed")
    response = JSONResponse(content={
        "ok": True,
        "order_id": placed.order_id,
        "summary": placed.totals.model_dump(mode="json"),
    })
    if placed.discount_codes.promo_code is None:
        response.delete_cookie(config.PROMO_COOKIE, path="/")
    return response


@api_router.post("/promo/apply")
async def apply_promo(request: Request, payload: ApplyPromoPayload):
    """
    Apply a promo code and remember it in the promo cookie.

    Returns:
        200: {"ok": true, "promo": {...}}
        400: CODE_REQUIRED
        404: INVALID_OR_EXPIRED
    """
    correlation_id = generate_correlation_id()
    discount_codes = read_discount_codes(request)

    async with get_db_session() as session:
        try:
            applied = await PromoService.apply_promo(
                code=payload.code,
                discount_codes=discount_codes,
                session=session,
                now=utc_now()
            )
        except StorefrontException as e:
            return error_response(correlation_id, e)
        except Exception:
            return internal_error_response(correlation_id)

    response = JSONResponse(content={"ok": True, "promo": applied.promo.model_dump(mode="json")})
    set_code_cookie(response, config.PROMO_COOKIE, applied.discount_codes.promo_code)
    return response


@api_router.post("/promo/clear")
async def clear_promo(request: Request):
    PromoService.clear_promo(read_discount_codes(request))
    response = JSONResponse(content={"ok": True})
    response.delete_cookie(config.PROMO_COOKIE, path="/")
    return response


@referral_router.get("/r/{code}")
async def referral_landing(code: str):
    """
    Referral link landing.

    Remembers the referral code for ATTRIBUTION_DAYS and redirects to the
    product of a product link, or to the store front for store links and
    unknown codes. The code is stored even when it doesn't resolve yet; pricing
    ignores it until it does.
    """
    code = code.strip()
    if not code:
        return RedirectResponse(url="/", status_code=status.HTTP_307_TEMPORARY_REDIRECT)

    target = "/"
    async with get_db_session() as session:
        try:
            referral = await ReferralLinkRepository.resolve(code, utc_now(), session)
        except Exception:
            logger.warning("[Referral] Could not resolve landing target", exc_info=True)
            referral = None

    if referral is not None and referral.link_type == ReferralLinkType.PRODUCT and referral.product_id:
        target = f"/product/{referral.product_id}"

    response = RedirectResponse(url=target, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
    set_code_cookie(response, config.REF_COOKIE, code)
    return response
