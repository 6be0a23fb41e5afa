from fastapi import APIRouter, HTTPException
from bundle_pricing.schemas.models import FinalizeReq, FinalizeOutput
from bundle_pricing.services.pricing_aggregator import build_order_payload, order_totals

router = APIRouter(prefix="/order", tags=["order"])


@router.post("/finalize", response_model=FinalizeOutput)
def finalize(req: FinalizeReq):
    """
    Stateless order body builder: line prices as allocated, subtotal,
    optional percentage discount and final total.
    """
    if not req.selection:
        raise HTTPException(status_code=400, detail="selection is required")

    totals = order_totals(req.selection, req.discount_percentage, req.discount_name)
    order = build_order_payload(req.selection, totals=totals)
    return FinalizeOutput(ok=True, order=order, totals=totals)
