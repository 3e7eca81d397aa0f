"""
Product Domain Model

Represents a sellable item in the store catalog.
This is the single source of truth for product data structure.
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime
from decimal import Decimal

from invenhub.core.config import settings
from invenhub.domain.catalog import ProductCategory


class Product(BaseModel):
    """
    Product domain model - represents a product in our catalog

    Fields:
        id: Internal product ID (primary key)
        name: Product name
        barcode: Scannable code, unique across the catalog
        category: Merchandise category
        price: Selling price
        cost_price: Purchase price from the supplier
        stock: Units on hand (never negative)
        image_url: Product picture
        supplier_id: Supplier that replenishes this product
        supplier_name: Supplier name (from JOIN)

        # Replenishment
        reorder_level: Stock at or below which the product counts as low
        auto_reorder: Whether purchase orders are filed automatically
        target_stock_level: Stock level an automatic reorder restocks to

        # Metadata
        created_at: When product was created
        updated_at: When product was last updated
    """

    # Primary identification
    id: int = Field(..., description="Internal product ID")
    name: str = Field(..., description="Product name")
    barcode: str = Field(..., description="Barcode")
    category: ProductCategory = Field(..., description="Product category")

    # Pricing and inventory
    price: Decimal = Field(..., description="Sale price", ge=0)
    cost_price: Decimal = Field(..., description="Cost/purchase price", ge=0)
    stock: int = Field(0, description="Units on hand", ge=0)
    image_url: Optional[str] = Field(None, description="Product image URL")

    # Supplier
    supplier_id: Optional[int] = Field(None, description="Supplier ID")
    supplier_name: Optional[str] = Field(None, description="Supplier name (from JOIN)")

    # Replenishment
    reorder_level: Optional[int] = Field(None, description="Low stock threshold", ge=0)
    auto_reorder: bool = Field(False, description="Automatic reordering enabled")
    target_stock_level: int = Field(0, description="Restock target for auto-reorder", ge=0)

    # Metadata
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    model_config = ConfigDict(from_attributes=True)

    # Computed properties
    @property
    def effective_reorder_level(self) -> int:
        """Reorder level, falling back to the store default when unset or zero"""
        return self.reorder_level or settings.DEFAULT_REORDER_LEVEL

    @property
    def is_low_stock(self) -> bool:
        """In stock but at or below the reorder level"""
        return 0 < self.stock <= self.effective_reorder_level

    @property
    def is_out_of_stock(self) -> bool:
        return self.stock == 0

    @property
    def margin(self) -> Decimal:
        """Gross margin per unit"""
        return self.price - self.cost_price

    def to_dict(self) -> dict:
        """
        Convert to dictionary with computed fields

        Returns dict with all fields plus computed properties
        """
        data = self.model_dump(mode="json")

        data['effective_reorder_level'] = self.effective_reorder_level
        data['is_low_stock'] = self.is_low_stock
        data['is_out_of_stock'] = self.is_out_of_stock
        data['margin'] = float(self.margin)

        # Convert Decimal to float for JSON compatibility
        data['price'] = float(self.price)
        data['cost_price'] = float(self.cost_price)

        return data


class ProductCreate(BaseModel):
    """Schema for creating a new product"""
    name: str = Field(..., min_length=1)
    barcode: str = Field(..., min_length=1)
    category: ProductCategory
    price: Decimal = Field(..., ge=0, decimal_places=2)
    cost_price: Decimal = Field(..., ge=0, decimal_places=2)
    stock: int = Field(0, ge=0)
    image_url: Optional[str] = None
    supplier_id: Optional[int] = None
    # Supplier may also be given by name; unknown names resolve to no supplier
    supplier: Optional[str] = None
    reorder_level: Optional[int] = Field(None, ge=0)
    auto_reorder: bool = False
    target_stock_level: int = Field(0, ge=0)


class ProductUpdate(BaseModel):
    """Schema for updating an existing product"""
    name: Optional[str] = Field(None, min_length=1)
    barcode: Optional[str] = Field(None, min_length=1)
    category: Optional[ProductCategory] = None
    price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    cost_price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    stock: Optional[int] = Field(None, ge=0)
    image_url: Optional[str] = None
    supplier_id: Optional[int] = None
    supplier: Optional[str] = None
    reorder_level: Optional[int] = Field(None, ge=0)
    auto_reorder: Optional[bool] = None
    target_stock_level: Optional[int] = Field(None, ge=0)


class AutoReorderToggle(BaseModel):
    enabled: bool


class TargetStockUpdate(BaseModel):
    target_stock_level: int
