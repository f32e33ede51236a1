"""API endpoints for the quoting service."""

import structlog
from fastapi import APIRouter, Depends

from bonding_curve.enums import SwapMode
from bonding_curve.migration import build_pool_config
from bonding_curve.models.params import ConfigParameters
from bonding_curve.models.quote import DerivedConfigResponse, QuoteRequest, SwapResultModel
from bonding_curve.quote import Quoter, get_default_quoter

logger = structlog.get_logger()

router = APIRouter()


def get_quoter() -> Quoter:
    """Dependency provider for the quoter instance.

    Override this in tests to inject a mock quoter:
        app.dependency_overrides[get_quoter] = lambda: mock_quoter

    Returns:
        The quoter to price trades with.
    """
    return get_default_quoter()


def _quote(request: QuoteRequest, swap_mode: SwapMode, quoter: Quoter) -> SwapResultModel:
    logger.info(
        "received_quote",
        swap_mode=swap_mode.name,
        trade_direction=request.trade_direction.name,
        amount=request.amount,
        has_pool=request.pool is not None,
    )

    config = build_pool_config(request.config)
    pool = request.to_virtual_pool(config)
    result = quoter.quote(
        pool, config, request.amount, request.trade_direction, swap_mode, request.to_context()
    )

    logger.info(
        "returning_quote",
        swap_mode=swap_mode.name,
        input_amount=result.included_fee_input_amount,
        output_amount=result.output_amount,
        amount_left=result.amount_left,
    )
    return SwapResultModel.from_swap_result(result)


@router.post("/quote/exact-in")
def quote_exact_in(request: QuoteRequest, quoter: Quoter = Depends(get_quoter)) -> SwapResultModel:
    """Price a trade that spends exactly `amount` of the input token."""
    return _quote(request, SwapMode.EXACT_IN, quoter)


@router.post("/quote/exact-out")
def quote_exact_out(request: QuoteRequest, quoter: Quoter = Depends(get_quoter)) -> SwapResultModel:
    """Price a trade that receives exactly `amount` of the output token."""
    return _quote(request, SwapMode.EXACT_OUT, quoter)


@router.post("/quote/partial-fill")
def quote_partial_fill(
    request: QuoteRequest, quoter: Quoter = Depends(get_quoter)
) -> SwapResultModel:
    """Price a buy that stops at the migration price.

    Input the curve cannot take is reported in amountLeft.
    """
    return _quote(request, SwapMode.PARTIAL_FILL, quoter)


@router.post("/config/derive")
def derive_config(params: ConfigParameters) -> DerivedConfigResponse:
    """Validate config parameters and return the values derived at pool creation."""
    config = build_pool_config(params)
    return DerivedConfigResponse.from_pool_config(config)
