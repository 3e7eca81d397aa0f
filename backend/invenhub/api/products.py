"""
Products API Endpoints
Catalog queries and maintenance, including auto-reorder settings
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import Optional

from invenhub.core.auth import TokenUser, require_admin, require_guest, require_staff
from invenhub.core.exceptions import ConflictError, NotFoundError, ValidationError
from invenhub.domain.product import AutoReorderToggle, ProductCreate, ProductUpdate, TargetStockUpdate
from invenhub.services.product_service import ProductService

router = APIRouter()


def get_product_service() -> ProductService:
    return ProductService()


@router.get("")
async def get_products(
    query: Optional[str] = Query(None, description="Search by name or barcode"),
    category: Optional[str] = Query(None, description="Filter by category ('all' for every category)"),
    supplier_id: Optional[int] = Query(None, description="Filter by supplier"),
    limit: Optional[int] = Query(None, ge=1, le=5000),
    offset: int = Query(0, ge=0),
    user: TokenUser = Depends(require_guest),
    service: ProductService = Depends(get_product_service)
):
    """
    Get all products with optional filters

    Returns products with stock flags (low / out of stock) and margin included
    """
    try:
        products, total = service.list_products(
            query=query,
            category=category,
            supplier_id=supplier_id,
            limit=limit,
            offset=offset
        )

        return {
            "status": "success",
            "total": total,
            "limit": limit,
            "offset": offset,
            "count": len(products),
            "data": [product.to_dict() for product in products]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching products: {str(e)}")


@router.get("/categories")
async def get_categories(
    user: TokenUser = Depends(require_guest),
    service: ProductService = Depends(get_product_service)
):
    try:
        return {"status": "success", "data": service.get_categories()}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching categories: {str(e)}")


@router.get("/low-stock")
async def get_low_stock_products(
    user: TokenUser = Depends(require_guest),
    service: ProductService = Depends(get_product_service)
):
    """Products at or below their reorder level, out of stock first"""
    try:
        products = service.get_low_stock()
        return {
            "status": "success",
            "count": len(products),
            "data": [product.to_dict() for product in products]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching low stock products: {str(e)}")


@router.get("/barcode/{barcode}")
async def get_product_by_barcode(
    barcode: str,
    user: TokenUser = Depends(require_guest),
    service: ProductService = Depends(get_product_service)
):
    """Lookup used by the till scanner"""
    try:
        return {"status": "success", "data": service.get_by_barcode(barcode).to_dict()}

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching product: {str(e)}")


@router.get("/{product_id}")
async def get_product(
    product_id: int,
    user: TokenUser = Depends(require_guest),
    service: ProductService = Depends(get_product_service)
):
    try:
        return {"status": "success", "data": service.get_product(product_id).to_dict()}

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching product: {str(e)}")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: ProductCreate,
    user: TokenUser = Depends(require_staff),
    service: ProductService = Depends(get_product_service)
):
    try:
        product = service.create_product(payload)
        return {"status": "success", "data": product.to_dict()}

    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating product: {str(e)}")


@router.put("/{product_id}")
async def update_product(
    product_id: int,
    payload: ProductUpdate,
    user: TokenUser = Depends(require_staff),
    service: ProductService = Depends(get_product_service)
):
    try:
        product = service.update_product(product_id, payload)
        return {"status": "success", "data": product.to_dict()}

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating product: {str(e)}")


@router.patch("/{product_id}/auto-reorder")
async def toggle_auto_reorder(
    product_id: int,
    payload: AutoReorderToggle,
    user: TokenUser = Depends(require_staff),
    service: ProductService = Depends(get_product_service)
):
    """
    Enable or disable automatic reordering

    Enabling it on a product without a target stock level sets one.
    """
    try:
        product = service.toggle_auto_reorder(product_id, payload.enabled)
        return {"status": "success", "data": product.to_dict()}

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating auto-reorder: {str(e)}")


@router.patch("/{product_id}/target-stock")
async def update_target_stock_level(
    product_id: int,
    payload: TargetStockUpdate,
    user: TokenUser = Depends(require_staff),
    service: ProductService = Depends(get_product_service)
):
    try:
        product = service.update_target_stock_level(product_id, payload.target_stock_level)
        return {"status": "success", "data": product.to_dict()}

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating target stock level: {str(e)}")


@router.delete("/{product_id}")
async def delete_product(
    product_id: int,
    user: TokenUser = Depends(require_admin),
    service: ProductService = Depends(get_product_service)
):
    try:
        service.delete_product(product_id)
        return {"status": "success", "message": f"Product {product_id} deleted"}

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting product: {str(e)}")
