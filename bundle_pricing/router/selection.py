from fastapi import APIRouter, Depends, HTTPException
from typing import List
from bundle_pricing.config import CURRENCY
from bundle_pricing.schemas.models import (
    CatalogGroup, CatalogItem, NotesReq, QuantityReq, SelectionLine, SelectionPayload,
    SelectionResult, ToggleReq,
)
from bundle_pricing.services import allocation_engine
from bundle_pricing.services.catalog import group_catalog, index_catalog
from bundle_pricing.services.catalog_loader import get_catalog
from bundle_pricing.services.portion_accounting import bundle_summary
from bundle_pricing.services.pricing_aggregator import line_view, total
#selection endpoints: every call carries the whole selection, nothing is stored
router = APIRouter()


def _result(selection: List[SelectionLine], catalog: List[CatalogItem]) -> SelectionResult:
    return SelectionResult(
        currency=CURRENCY,
        selection=selection,
        lines=[line_view(ln) for ln in selection],
        bundle=bundle_summary(selection, catalog),
        subtotal=total(selection),
    )


@router.get("/catalog", response_model=List[CatalogGroup])
def catalog(catalog: List[CatalogItem] = Depends(get_catalog)):
    """Menu items grouped by category in display order."""
    return group_catalog(catalog)


@router.post("/selection/toggle", response_model=SelectionResult)
def toggle(req: ToggleReq, catalog: List[CatalogItem] = Depends(get_catalog)):
    """
    Select or deselect one (item, serving size) option.
    A newly added side/sauce is included in the active combo if budget allows.
    """
    if req.item_id not in index_catalog(catalog):
        raise HTTPException(status_code=404, detail=f"Menu item '{req.item_id}' not found")

    selection = allocation_engine.toggle(req.selection, catalog, req.item_id, req.serving_size)
    return _result(selection, catalog)


@router.post("/selection/quantity", response_model=SelectionResult)
def quantity(req: QuantityReq, catalog: List[CatalogItem] = Depends(get_catalog)):
    """Change a line's quantity; quantities below 1 leave the selection as is."""
    selection = allocation_engine.update_quantity(
        req.selection, catalog, req.item_id, req.serving_size, req.quantity
    )
    return _result(selection, catalog)


@router.post("/selection/notes", response_model=SelectionResult)
def notes(req: NotesReq, catalog: List[CatalogItem] = Depends(get_catalog)):
    selection = allocation_engine.update_notes(req.selection, req.item_id, req.serving_size, req.notes)
    return _result(selection, catalog)


@router.post("/selection/recompute", response_model=SelectionResult)
def recompute(req: SelectionPayload, catalog: List[CatalogItem] = Depends(get_catalog)):
    """Re-price a loaded selection line by line, in order."""
    selection = allocation_engine.recompute(req.selection, catalog)
    return _result(selection, catalog)
