"""
Supplier Domain Model

A supplier replenishes one or more products. The product list is derived
from products.supplier_id, so it never drifts from the catalog.
"""
from pydantic import BaseModel, Field, ConfigDict, EmailStr, field_validator
from typing import Optional, List
from datetime import datetime
from decimal import Decimal


class SupplierProduct(BaseModel):
    """Lightweight product summary shown under a supplier"""
    id: int
    name: str
    category: str
    price: Decimal
    stock: int

    def to_dict(self) -> dict:
        data = self.model_dump()
        data['price'] = float(self.price)
        return data


class Supplier(BaseModel):
    """
    Supplier domain model

    Fields:
        id: Internal supplier ID
        name: Company name
        contact_person: Person to contact for orders
        email: Contact email (stored lower-case)
        phone: Contact phone
        address: Postal address
        products: Products this supplier replenishes
    """

    id: int = Field(..., description="Supplier ID")
    name: str = Field(..., description="Company name")
    contact_person: str = Field(..., description="Contact person")
    email: str = Field(..., description="Contact email")
    phone: str = Field(..., description="Contact phone")
    address: str = Field(..., description="Postal address")
    products: List[SupplierProduct] = Field(default_factory=list)
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    model_config = ConfigDict(from_attributes=True)

    def to_dict(self) -> dict:
        data = self.model_dump(mode="json")
        data['products'] = [product.to_dict() for product in self.products]
        return data


def _strip(value):
    return value.strip() if isinstance(value, str) else value


class SupplierCreate(BaseModel):
    """Schema for creating a new supplier"""
    name: str = Field(..., min_length=1)
    contact_person: str = Field(..., min_length=1)
    email: EmailStr
    phone: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)

    @field_validator("name", "contact_person", "phone", "address", mode="before")
    @classmethod
    def strip_text(cls, value):
        return _strip(value)

    @field_validator("email", mode="after")
    @classmethod
    def lower_email(cls, value):
        return value.lower()


class SupplierUpdate(BaseModel):
    """Schema for updating an existing supplier"""
    name: Optional[str] = Field(None, min_length=1)
    contact_person: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, min_length=1)
    address: Optional[str] = Field(None, min_length=1)

    @field_validator("name", "contact_person", "phone", "address", mode="before")
    @classmethod
    def strip_text(cls, value):
        return _strip(value)

    @field_validator("email", mode="after")
    @classmethod
    def lower_email(cls, value):
        return value.lower() if value else value
