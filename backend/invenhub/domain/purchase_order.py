"""
Purchase Order Domain Models

A purchase order asks one supplier to replenish one or more products.
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from datetime import datetime
from decimal import Decimal

from invenhub.domain.catalog import PurchaseOrderStatus


class PurchaseOrderItem(BaseModel):
    """Purchase order line"""
    id: Optional[int] = None
    product_id: Optional[int] = Field(None, description="Product to replenish (None once deleted)")
    product_name: Optional[str] = Field(None, description="Product name at order time")
    quantity: int = Field(..., ge=1)
    unit_price: Decimal = Field(..., ge=0)

    model_config = ConfigDict(from_attributes=True)

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def to_dict(self) -> dict:
        data = self.model_dump()
        data['unit_price'] = float(self.unit_price)
        data['line_total'] = float(self.line_total)
        return data


class PurchaseOrder(BaseModel):
    """
    Purchase order domain model

    Fields:
        id: Internal purchase order ID
        supplier_id: Supplier the order goes to
        supplier_name: Supplier name (from JOIN)
        items: Lines to replenish
        status: pending, ordered, received or canceled
        total_amount: Sum of line totals
        order_date: When the order was raised
        expected_delivery_date: When the goods are due
        delivered_date: Set when the order is received
        is_auto_generated: Raised by the auto-reorder job
    """

    id: int
    supplier_id: int
    supplier_name: Optional[str] = None
    items: List[PurchaseOrderItem] = Field(default_factory=list)
    status: PurchaseOrderStatus = PurchaseOrderStatus.PENDING
    total_amount: Decimal = Field(..., ge=0)
    order_date: datetime
    expected_delivery_date: Optional[datetime] = None
    delivered_date: Optional[datetime] = None
    is_auto_generated: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_open(self) -> bool:
        return self.status in (PurchaseOrderStatus.PENDING, PurchaseOrderStatus.ORDERED)

    def to_dict(self) -> dict:
        data = self.model_dump(mode="json")
        data['items'] = [item.to_dict() for item in self.items]
        data['total_amount'] = float(self.total_amount)
        return data


class PurchaseOrderItemCreate(BaseModel):
    product_id: int
    quantity: int = Field(..., ge=1)
    unit_price: Decimal = Field(..., ge=0, decimal_places=2)


class PurchaseOrderCreate(BaseModel):
    """Schema for creating a purchase order"""
    supplier_id: int
    items: List[PurchaseOrderItemCreate]
    status: PurchaseOrderStatus = PurchaseOrderStatus.PENDING
    total_amount: Optional[Decimal] = Field(None, ge=0)
    order_date: Optional[datetime] = None
    expected_delivery_date: Optional[datetime] = None
    is_auto_generated: bool = False


class PurchaseOrderStatusUpdate(BaseModel):
    status: PurchaseOrderStatus
