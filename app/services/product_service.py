from sqlalchemy.orm import Session
from sqlalchemy import and_, case, delete, func, update
from sqlalchemy.exc import SQLAlchemyError
from typing import Optional, List, Tuple
import math
import logging

from app.config import get_settings
from app.models.product import Product, utcnow
from app.schemas.product import ProductCreate, ProductUpdate, ProductQuery

logger = logging.getLogger(__name__)

settings = get_settings()


def build_filters(options: ProductQuery) -> list:
    """
    Translate listing options into independent predicates.

    Only options that are present contribute a predicate; the caller ANDs
    them together. Every value ends up as a bound parameter.
    """
    predicates = []

    if options.search:
        # LIKE follows the store's collation (case-insensitive ASCII on SQLite)
        predicates.append(Product.name.like(f"%{options.search}%"))
    if options.min_price is not None:
        predicates.append(Product.price >= options.min_price)
    if options.max_price is not None:
        predicates.append(Product.price <= options.max_price)
    if options.min_stock is not None:
        predicates.append(Product.stock >= options.min_stock)
    if options.max_stock is not None:
        predicates.append(Product.stock <= options.max_stock)

    return predicates


def count_pages(total: int, limit: int) -> int:
    """Number of pages needed for `total` rows, 0 when nothing matched."""
    return math.ceil(total / limit) if total > 0 else 0


class ProductService:
    """
    Repository for the products table.

    This service handles:
    - Filtered, paginated listing
    - Point lookups (None marks a missing row, never an exception)
    - Create / partial update / hard delete
    - The inventory metrics report

    Store failures are not caught here beyond rolling back the session;
    they propagate to the exception handlers in app.utils.errors.
    """

    def __init__(self, db: Session):
        self.db = db

    def create(self, product_data: ProductCreate) -> Product:
        """
        Create a new product.

        Args:
            product_data: Product creation data

        Returns:
            Created product, re-read so generated fields are populated

        Raises:
            IntegrityError: If a store constraint rejects the row
        """
        product = Product(
            name=product_data.name,
            price=product_data.price,
            stock=product_data.stock
        )
        try:
            self.db.add(product)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        self.db.refresh(product)
        logger.info(f"Product #{product.id} created")
        return product

    def get_by_id(self, product_id: int) -> Optional[Product]:
        """
        Get a product by ID.

        Args:
            product_id: Product ID to look up

        Returns:
            Product instance or None if not found
        """
        return self.db.query(Product).filter(Product.id == product_id).first()

    def get_all(self, options: ProductQuery) -> Tuple[List[Product], int, int]:
        """
        Get a filtered, paginated list of products, newest first.

        Args:
            options: Page, page size and optional filters

        Returns:
            Tuple of (products list, total matching count, total pages)
        """
        query = self.db.query(Product)

        predicates = build_filters(options)
        if predicates:
            query = query.filter(and_(*predicates))

        total = query.count()
        total_pages = count_pages(total, options.limit)

        products = (
            query.order_by(Product.id.desc())
            .offset(options.offset)
            .limit(options.limit)
            .all()
        )

        return products, total, total_pages

    def update(self, product_id: int, product_data: ProductUpdate) -> Optional[Product]:
        """
        Apply a partial update in a single UPDATE statement.

        Args:
            product_id: ID of product to update
            product_data: Update data (only explicitly set fields are written)

        Returns:
            Updated product, or None if no product has this ID
        """
        values = product_data.model_dump(exclude_unset=True)

        if not values:
            # Nothing to write
            return self.get_by_id(product_id)

        values["updated_at"] = utcnow()
        statement = (
            update(Product)
            .where(Product.id == product_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )

        try:
            result = self.db.execute(statement)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        if result.rowcount == 0:
            return None

        logger.info(f"Product #{product_id} updated: {', '.join(sorted(values))}")
        return self.get_by_id(product_id)

    def delete(self, product_id: int) -> bool:
        """
        Delete a product.

        Args:
            product_id: ID of product to delete

        Returns:
            True if deleted, False if not found
        """
        statement = (
            delete(Product)
            .where(Product.id == product_id)
            .execution_options(synchronize_session=False)
        )

        try:
            result = self.db.execute(statement)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        deleted = result.rowcount > 0
        if deleted:
            logger.info(f"Product #{product_id} deleted")
        return deleted

    def compute_metrics(self) -> dict:
        """
        Build the inventory report.

        One aggregate query plus three top-N queries, run one after another in
        this session. The store is not asked for a snapshot, so a write landing
        between them can make the lists and the totals disagree slightly.

        Returns:
            Dictionary matching the ProductMetrics schema
        """
        threshold = settings.LOW_STOCK_THRESHOLD
        top_n = settings.METRICS_TOP_N

        totals = self.db.query(
            func.count(Product.id).label("total_products"),
            func.sum(Product.price * Product.stock).label("total_inventory_value"),
            func.avg(Product.price).label("average_price"),
            func.min(Product.price).label("min_price"),
            func.max(Product.price).label("max_price"),
            func.sum(case((Product.stock < threshold, 1), else_=0)).label("low_stock_products"),
            func.sum(Product.stock).label("total_stock"),
        ).one()

        low_stock_items = (
            self.db.query(Product)
            .filter(Product.stock < threshold)
            .order_by(Product.stock.asc(), Product.id.asc())
            .limit(top_n)
            .all()
        )
        most_expensive = (
            self.db.query(Product)
            .order_by(Product.price.desc(), Product.id.asc())
            .limit(top_n)
            .all()
        )
        cheapest = (
            self.db.query(Product)
            .order_by(Product.price.asc(), Product.id.asc())
            .limit(top_n)
            .all()
        )

        # Aggregates over an empty table come back as NULL
        average_price = totals.average_price
        return {
            "total_products": totals.total_products or 0,
            "total_inventory_value": totals.total_inventory_value or 0,
            "average_price": round(average_price, 2) if average_price is not None else 0,
            "min_price": totals.min_price or 0,
            "max_price": totals.max_price or 0,
            "low_stock_products": totals.low_stock_products or 0,
            "total_stock": totals.total_stock or 0,
            "low_stock_items": low_stock_items,
            "most_expensive": most_expensive,
            "cheapest": cheapest,
        }
