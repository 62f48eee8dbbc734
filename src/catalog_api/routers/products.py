from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from ..schemas import ProductIn, ProductOut
from ..services import ProductService

router = APIRouter(
    prefix="/api/v1/products",
    tags=["products"],
)

_NOT_FOUND = "Product not found"


def get_product_service(request: Request) -> ProductService:
    """
    Dependency returning the ProductService built by create_app.
    """
    return request.app.state.product_service


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=List[ProductOut],
    summary="List Products",
    description="Return every product. The list is empty when none exist.",
)
def list_products(service: ProductService = Depends(get_product_service)) -> List[ProductOut]:
    return [ProductOut(**p) for p in service.list_all()]  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=ProductOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Product",
    description="Create a new product. Any id or created_at in the body is ignored.",
    responses={
        201: {"description": "Product created successfully"},
        422: {"description": "Validation error"},
    },
)
def create_product(payload: ProductIn, service: ProductService = Depends(get_product_service)) -> ProductOut:
    created = service.create(payload)
    return ProductOut(**created)  # type: ignore[arg-type]


# Filter routes are registered before /{product_id} so their literal path
# segments are not parsed as ids.

# PUBLIC_INTERFACE
@router.get(
    "/search",
    response_model=List[ProductOut],
    summary="Search Products by Name",
    description="Case-insensitive substring match on the product name.",
)
def search_products(
    name: str = Query(..., description="Text to look for in product names"),
    service: ProductService = Depends(get_product_service),
) -> List[ProductOut]:
    return [ProductOut(**p) for p in service.search_by_name(name)]  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.get(
    "/category/{category}",
    response_model=List[ProductOut],
    summary="List Products by Category",
    description="Exact match on the category label.",
)
def products_by_category(category: str, service: ProductService = Depends(get_product_service)) -> List[ProductOut]:
    return [ProductOut(**p) for p in service.find_by_category(category)]  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.get(
    "/stock/{minimum}",
    response_model=List[ProductOut],
    summary="List Products with Minimum Stock",
    description="Products whose stock is greater than or equal to the given minimum.",
)
def products_with_stock(minimum: int, service: ProductService = Depends(get_product_service)) -> List[ProductOut]:
    return [ProductOut(**p) for p in service.find_with_min_stock(minimum)]  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.get(
    "/{product_id}",
    response_model=ProductOut,
    summary="Get Product",
    responses={
        200: {"description": "Product found"},
        404: {"description": "Product not found"},
    },
)
def get_product(product_id: int, service: ProductService = Depends(get_product_service)) -> ProductOut:
    item = service.get(product_id)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_NOT_FOUND)
    return ProductOut(**item)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.put(
    "/{product_id}",
    response_model=ProductOut,
    summary="Replace Product",
    description=(
        "Replace every mutable field of an existing product. Omitted optional fields are reset "
        "to their defaults; id and created_at are never changed."
    ),
    responses={
        200: {"description": "Product updated"},
        404: {"description": "Product not found"},
    },
)
def put_product(
    product_id: int, payload: ProductIn, service: ProductService = Depends(get_product_service)
) -> ProductOut:
    updated = service.update(product_id, payload)
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_NOT_FOUND)
    return ProductOut(**updated)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Product",
    responses={
        204: {"description": "Product deleted"},
        404: {"description": "Product not found"},
    },
)
def delete_product(product_id: int, service: ProductService = Depends(get_product_service)) -> None:
    """
    Delete a Product. Returns 204 on success, 404 if not found.
    """
    if not service.delete(product_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_NOT_FOUND)
    return None
