from enum import Enum
from typing import List, Optional, Dict, Any, Set, Tuple
from pydantic import BaseModel, Field, AliasChoices, ConfigDict, field_validator, model_validator
from bundle_pricing.utils.common import _coerce_selection_list

# ---------------------------------------------------------------------
# ENUMS
# ---------------------------------------------------------------------

class MenuCategory(str, Enum):
    ROASTS = "roasts"
    SMOKED_SALMON = "smoked_salmon"
    POTATOES = "potatoes"
    VEGETABLES = "vegetables"
    SAUCES = "sauces"
    DESSERTS = "desserts"
    OFF_THE_MENU = "off_the_menu"


class SizeClass(str, Enum):
    FOUR = "4"
    EIGHT = "8"
    OTHER = "other"


class ItemStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    NOT_COLLECTED = "not_collected"
    COLLECTED = "collected"


class LineState(str, Enum):
    INCLUDED = "included"
    PARTIAL = "partial"
    CHARGED = "charged"


SIDE_CATEGORIES = {MenuCategory.POTATOES, MenuCategory.VEGETABLES}
SAUCE_CATEGORIES = {MenuCategory.SAUCES}

CATEGORY_ALIASES = {
    "roast": "roasts",
    "smoked-salmon": "smoked_salmon",
    "smoked salmon": "smoked_salmon",
    "salmon": "smoked_salmon",
    "potato": "potatoes",
    "vegetable": "vegetables",
    "veg": "vegetables",
    "sauce": "sauces",
    "dessert": "desserts",
    "off-the-menu": "off_the_menu",
    "off the menu": "off_the_menu",
}


def looks_like_combo(name: str) -> bool:
    """Legacy name test for "roast with sides" items."""
    n = (name or "").lower()
    return "turkey" in n and "side" in n


def guess_size_class(serving_size: str) -> SizeClass:
    """Legacy label test: "8" wins over "4", anything else is OTHER."""
    s = (serving_size or "").lower()
    if "8" in s:
        return SizeClass.EIGHT
    if "4" in s:
        return SizeClass.FOUR
    return SizeClass.OTHER


def guess_mixing_classes(serving_size: str) -> Set[SizeClass]:
    """Legacy no-mixing test: a label can mark the 4-class, the 8-class, or both."""
    s = (serving_size or "").lower()
    out = set()
    if "4" in s:
        out.add(SizeClass.FOUR)
    if "8" in s:
        out.add(SizeClass.EIGHT)
    return out


# ---------------------------------------------------------------------
# CATALOG
# ---------------------------------------------------------------------

class PriceOption(BaseModel):
    """One purchasable serving size of a catalog item."""
    model_config = ConfigDict(extra="ignore")

    serving_size: str = Field(validation_alias=AliasChoices("serving_size", "servingSize"))
    price: float
    size_class: Optional[SizeClass] = Field(
        default=None, validation_alias=AliasChoices("size_class", "sizeClass")
    )
    mixing_classes: Optional[Set[SizeClass]] = Field(
        default=None, validation_alias=AliasChoices("mixing_classes", "mixingClasses")
    )

    @model_validator(mode="after")
    def v_default_size_tags(self):
        if self.mixing_classes is None:
            if self.size_class is None:
                self.mixing_classes = guess_mixing_classes(self.serving_size)
            else:
                self.mixing_classes = {self.size_class} - {SizeClass.OTHER}
        if self.size_class is None:
            self.size_class = guess_size_class(self.serving_size)
        return self


class BundlePolicy(BaseModel):
    """Combo budget attached to one serving size of a combo-eligible item."""
    model_config = ConfigDict(extra="ignore")

    serving_size: str = Field(validation_alias=AliasChoices("serving_size", "servingSize"))
    max_portions: int = Field(validation_alias=AliasChoices("max_portions", "maxPortions"))
    max_sauces: int = Field(validation_alias=AliasChoices("max_sauces", "maxSauces"))
    allow_mixing: bool = Field(validation_alias=AliasChoices("allow_mixing", "allowMixing"))
    portion_weights: Dict[str, float] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("portion_weights", "portionWeights", "portionValues"),
    )

    @field_validator("portion_weights", mode="before")
    @classmethod
    def v_weights(cls, v):
        if v is None:
            return {}
        # backend list form: [{"servingSize": ..., "portionValue": ...}]
        if isinstance(v, list):
            out = {}
            for pv in v:
                if not isinstance(pv, dict):
                    continue
                size = (pv.get("servingSize") or pv.get("serving_size") or "").strip()
                if not size:
                    continue
                out[size] = pv.get("portionValue", pv.get("portion_value", 0)) or 0
            return out
        return v


class CatalogItem(BaseModel):
    """Read-only menu entry supplied by the catalog endpoint."""
    model_config = ConfigDict(extra="ignore")

    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    name: str
    description: Optional[str] = None
    category: MenuCategory
    pricing: List[PriceOption] = Field(default_factory=list)
    allergens: List[str] = Field(default_factory=list)
    is_available: bool = Field(default=True, validation_alias=AliasChoices("is_available", "isAvailable"))
    bundle_config: List[BundlePolicy] = Field(
        default_factory=list, validation_alias=AliasChoices("bundle_config", "bundleConfig")
    )
    is_combo: Optional[bool] = Field(default=None, validation_alias=AliasChoices("is_combo", "isCombo"))

    @field_validator("id", mode="before")
    @classmethod
    def v_id(cls, v):
        # ObjectId or int ids from the store
        return str(v) if v is not None else v

    @field_validator("category", mode="before")
    @classmethod
    def v_category(cls, v):
        if isinstance(v, str):
            key = v.strip().lower()
            return CATEGORY_ALIASES.get(key, key)
        return v

    @field_validator("bundle_config", "pricing", "allergens", mode="before")
    @classmethod
    def v_none_list(cls, v):
        return [] if v is None else v

    @model_validator(mode="after")
    def v_default_combo_tag(self):
        if self.is_combo is None:
            self.is_combo = looks_like_combo(self.name)
        return self

    def price_option(self, serving_size: str) -> Optional[PriceOption]:
        return next((p for p in self.pricing if p.serving_size == serving_size), None)

    def policy_for(self, serving_size: str) -> Optional[BundlePolicy]:
        return next((b for b in self.bundle_config if b.serving_size == serving_size), None)


# ---------------------------------------------------------------------
# SELECTION
# ---------------------------------------------------------------------

class SelectionLine(BaseModel):
    """One row of the in-progress order."""
    model_config = ConfigDict(extra="ignore")

    menu_item: str = Field(validation_alias=AliasChoices("menu_item", "menuItem"))
    name: str
    serving_size: str = Field(validation_alias=AliasChoices("serving_size", "servingSize"))
    quantity: int = Field(default=1, ge=1)
    unit_price: float = Field(validation_alias=AliasChoices("unit_price", "price"))
    charged_total: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("charged_total", "totalPrice")
    )
    status: ItemStatus = ItemStatus.PENDING
    notes: str = ""
    included_in_bundle: bool = Field(
        default=False, validation_alias=AliasChoices("included_in_bundle", "isIncludedInBundle")
    )

    @field_validator("notes", mode="before")
    @classmethod
    def v_notes(cls, v):
        return v or ""

    @model_validator(mode="after")
    def v_default_charged_total(self):
        if self.charged_total is None:
            self.charged_total = self.unit_price * self.quantity
        return self

    @property
    def key(self) -> Tuple[str, str]:
        return (self.menu_item, self.serving_size)


# ---------------------------------------------------------------------
# ENGINE RESULTS
# ---------------------------------------------------------------------

class ActiveBundle(BaseModel):
    """Effective budget of the combo currently in the selection."""
    host_item_id: str
    host_serving_size: str
    price: float
    max_portions: int
    max_sauces: int
    allow_mixing: bool
    portion_weights: Dict[str, float] = Field(default_factory=dict)
    source: str = "policy"  # "policy" or "legacy"

    def weight_for(self, serving_size: str, size_class: SizeClass) -> float:
        if serving_size in self.portion_weights:
            return float(self.portion_weights[serving_size])
        if size_class == SizeClass.EIGHT:
            return 2
        if size_class == SizeClass.FOUR:
            return 1
        return 0


class BundleTally(BaseModel):
    portions_used: float = 0
    sauces_used: int = 0
    size_classes_used: Set[SizeClass] = Field(default_factory=set)


class BundleSummary(BaseModel):
    """Banner data for the active combo."""
    price: float
    source: str
    portions_used: float
    max_portions: int
    sauces_used: int
    max_sauces: int
    allow_mixing: bool
    size_classes_used: List[SizeClass] = Field(default_factory=list)


class LineView(BaseModel):
    menu_item: str
    name: str
    serving_size: str
    quantity: int
    unit_price: float
    charged_total: float
    included_units: int
    state: LineState
    label: str


class OrderTotals(BaseModel):
    subtotal: float
    discount_percentage: float = 0
    discount_name: Optional[str] = None
    discount_amount: float = 0
    total: float


# ---------------------------------------------------------------------
# REQUEST / RESPONSE BODIES
# ---------------------------------------------------------------------

class SelectionPayload(BaseModel):
    """Selection passed to the stateless engine endpoints."""
    selection: List[SelectionLine] = Field(default_factory=list)

    @field_validator("selection", mode="before")
    @classmethod
    def v_selection(cls, v):
        return _coerce_selection_list(v)


class ToggleReq(SelectionPayload):
    item_id: str
    serving_size: str


class QuantityReq(SelectionPayload):
    item_id: str
    serving_size: str
    quantity: int


class NotesReq(SelectionPayload):
    item_id: str
    serving_size: str
    notes: str = ""


class FinalizeReq(SelectionPayload):
    discount_percentage: float = Field(default=0, ge=0, le=100)
    discount_name: Optional[str] = None


class SelectionResult(BaseModel):
    currency: str
    selection: List[SelectionLine]
    lines: List[LineView]
    bundle: Optional[BundleSummary] = None
    subtotal: float


class CatalogGroup(BaseModel):
    category: MenuCategory
    title: str
    items: List[CatalogItem]


class FinalizeOutput(BaseModel):
    """Order body handed to the order backend."""
    ok: bool
    order: Dict[str, Any]
    totals: OrderTotals
