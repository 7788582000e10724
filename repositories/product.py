from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute
from models.product import Product, ProductPriceFactsDTO


class ProductRepository:
    """Catalog reader: trusted price facts for the products in a cart."""

    @staticmethod
    async def get_price_facts(
        product_ids: list[str],
        session: Session | AsyncSession
    ) -> list[ProductPriceFactsDTO]:
        """
        Batch-load price facts for the given products (single query).

        Args:
            product_ids: Product IDs (duplicates allowed)
            session: Database session

        Returns:
            List of ProductPriceFactsDTO for the products that exist; missing IDs are
            simply absent from the result
        """
        if not product_ids:
            return []

        stmt = select(Product).where(Product.id.in_(set(product_ids)))
        result = await session_execute(stmt, session)
        products = result.scalars().all()
        return [ProductPriceFactsDTO.model_validate(product, from_attributes=True) for product in products]
