from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from posapp.schemas.common import FormModel, OptionItem


class ItemForm(FormModel):
    product_type_id: int = Field(..., gt=0, description="Goods or service")
    category_id: Optional[int] = Field(None, description="Category (optional)")
    item_name: str = Field(..., min_length=1, max_length=200, description="Item name (required)")
    item_code: Optional[str] = Field(None, max_length=100, description="Item code / SKU, unique when given")
    hsn_code: Optional[str] = Field(None, max_length=50, description="HSN / SAC code")
    description: Optional[str] = Field(None, description="Free text description")
    is_active: bool = Field(True, description="Whether the item can be sold")

    # Pricing
    sales_price: Optional[float] = Field(None, ge=0, description="Sales price")
    purchase_price: Optional[float] = Field(None, ge=0, description="Purchase price")
    mrp: Optional[float] = Field(None, ge=0, description="Maximum retail price")
    gst_rate_id: Optional[int] = Field(None, description="GST slab")

    # Stock
    opening_stock: Optional[float] = Field(None, ge=0, description="Opening stock")
    current_stock: Optional[float] = Field(None, ge=0, description="Defaults to the opening stock")
    unit_id: Optional[int] = Field(None, description="Unit of measure")
    as_of_date: Optional[date] = Field(None, description="Stock date, defaults to today")

    @field_validator("item_name")
    @classmethod
    def validate_not_empty(cls, v: str, info) -> str:
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} cannot be empty or whitespace only")
        return v.strip()

    @field_validator("sales_price", "purchase_price", "mrp")
    @classmethod
    def round_price(cls, v: Optional[float]) -> Optional[float]:
        if v is None:
            return v
        return round(v, 2)

    @property
    def has_pricing(self) -> bool:
        return any(v is not None for v in (self.sales_price, self.purchase_price, self.mrp, self.gst_rate_id))

    @property
    def has_stock(self) -> bool:
        return any(v is not None for v in (self.opening_stock, self.current_stock, self.unit_id, self.as_of_date))


class UnitOption(OptionItem):
    code: Optional[str] = None


class GstRateOption(BaseModel):
    id: int
    rate: float
    description: Optional[str] = None


class ItemOptions(BaseModel):
    product_types: List[OptionItem]
    categories: List[OptionItem]
    units: List[UnitOption]
    gst_rates: List[GstRateOption]


class ItemResponse(BaseModel):
    id: int
    product_type_id: int
    product_type_name: Optional[str] = None
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    item_name: str
    item_code: Optional[str] = None
    hsn_code: Optional[str] = None
    description: Optional[str] = None
    is_active: bool
    sales_price: Optional[float] = None
    purchase_price: Optional[float] = None
    mrp: Optional[float] = None
    gst_rate_id: Optional[int] = None
    gst_rate: Optional[float] = None
    opening_stock: Optional[float] = None
    current_stock: Optional[float] = None
    unit_id: Optional[int] = None
    unit_name: Optional[str] = None
    as_of_date: Optional[date] = None
    created_on: Optional[datetime] = None

    class Config:
        from_attributes = True
