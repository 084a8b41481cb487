from fastapi import APIRouter, Query
from starlette import status
from utils.deps import db_dependency, optional_identity_dependency
from schemas.catalog_schemas import CategoryResponse, ProductResponse
from services.catalog_service import CatalogService


router = APIRouter(
    tags=["catalog"]
)


@router.get("/categories", response_model=list[CategoryResponse], status_code=status.HTTP_200_OK)
async def list_categories(db: db_dependency, identity: optional_identity_dependency):
    return CatalogService.list_categories(db, identity)


@router.get("/products", response_model=list[ProductResponse], status_code=status.HTTP_200_OK)
async def list_products(
    db: db_dependency,
    identity: optional_identity_dependency,
    category: str | None = Query(default=None, description='Category id, or "all"'),
    search: str | None = Query(default=None, description="Case-insensitive match on name or description")
):
    """
    Product grid, newest first. Public.
    """
    return CatalogService.search_products(db, category_id=category, search=search, identity=identity)


@router.get("/products/{product_id}", response_model=ProductResponse, status_code=status.HTTP_200_OK)
async def get_product(product_id: int, db: db_dependency, identity: optional_identity_dependency):
    return CatalogService.get_product(db, product_id, identity)
