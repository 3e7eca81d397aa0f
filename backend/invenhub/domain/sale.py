"""
Sale Domain Models

A sale keeps a snapshot of every product it sold so receipts and analytics
stay correct after the catalog changes.
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from datetime import datetime
from decimal import Decimal

from invenhub.domain.catalog import PaymentMethod, SaleChannel


class ProductSnapshot(BaseModel):
    """Product data frozen at the time of sale"""
    name: str
    category: str
    price: Decimal
    barcode: str
    cost_price: Decimal = Decimal('0')


class SaleItem(BaseModel):
    """
    Sale line item

    Fields:
        id: Internal line ID
        product_id: Product sold (may be None once the product is deleted)
        product_snapshot: Product data at sale time
        quantity: Units sold
        price_at_sale: Unit price charged
    """

    id: Optional[int] = Field(None, description="Sale item ID")
    product_id: Optional[int] = Field(None, description="Product catalog ID")
    product_snapshot: ProductSnapshot
    quantity: int = Field(..., description="Units sold", ge=1)
    price_at_sale: Decimal = Field(..., description="Unit price charged", ge=0)

    model_config = ConfigDict(from_attributes=True)

    @property
    def line_total(self) -> Decimal:
        return self.price_at_sale * self.quantity

    @property
    def line_cost(self) -> Decimal:
        return self.product_snapshot.cost_price * self.quantity

    def to_dict(self) -> dict:
        data = self.model_dump(mode="json")
        data['price_at_sale'] = float(self.price_at_sale)
        data['line_total'] = float(self.line_total)
        data['product_snapshot']['price'] = float(self.product_snapshot.price)
        data['product_snapshot']['cost_price'] = float(self.product_snapshot.cost_price)
        return data


class Sale(BaseModel):
    """
    Sale domain model - one completed checkout

    Invariants:
        subtotal == sum of line totals
        total_amount == subtotal + tax_amount
    """

    id: int = Field(..., description="Sale ID")
    items: List[SaleItem] = Field(default_factory=list)
    subtotal: Decimal = Field(..., ge=0)
    tax_amount: Decimal = Field(Decimal('0'), ge=0)
    total_amount: Decimal = Field(..., ge=0)
    payment_method: PaymentMethod
    channel: SaleChannel
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    employee_id: str
    timestamp: datetime
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def item_count(self) -> int:
        """Total units across all lines"""
        return sum(item.quantity for item in self.items)

    @property
    def total_cost(self) -> Decimal:
        return sum((item.line_cost for item in self.items), Decimal('0'))

    def to_dict(self) -> dict:
        data = self.model_dump(mode="json")
        data['items'] = [item.to_dict() for item in self.items]
        data['item_count'] = self.item_count
        for field in ['subtotal', 'tax_amount', 'total_amount']:
            data[field] = float(getattr(self, field))
        return data


class SaleItemCreate(BaseModel):
    product_id: int
    quantity: int = Field(..., ge=1)
    price_at_sale: Optional[Decimal] = Field(None, ge=0, decimal_places=2)


class SaleCreate(BaseModel):
    """Schema for recording a sale at the till or from the web shop"""
    items: List[SaleItemCreate]
    payment_method: PaymentMethod
    channel: SaleChannel
    employee_id: str = Field(..., min_length=1)
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    # Optional client-side total; must agree with the server computation
    total_amount: Optional[Decimal] = Field(None, ge=0)
