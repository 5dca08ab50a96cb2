"""Import the FakeStore catalog into the local store.

Rows are matched on ``(external_source, external_id)`` and are only ever
created, never updated. Each new row is committed on its own, so a failed
run keeps what it already imported and a re-run picks up the rest.
"""

import uuid
from dataclasses import dataclass
from typing import Optional

from libs.common.config import get_settings
from libs.common.errors import UpstreamUnavailableError
from libs.common.logging import get_logger
from libs.common.money import to_money
from services.store_service.models import FAKESTORE_SOURCE, Category, Product
from services.store_service.repositories import CategoryRepository, ProductRepository
from services.store_service.services.fakestore_client import (
    FakeStoreClient,
    FakeStoreProduct,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


@dataclass(frozen=True)
class SyncResult:
    imported_count: int
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


# Remote strings are cut to the local column widths
CATEGORY_NAME_LENGTH = 100
EXTERNAL_ID_LENGTH = 255


async def _find_category(
    db: AsyncSession, name: str, external_id: str
) -> Optional[Category]:
    repo = CategoryRepository(db)
    existing = await repo.get_by_external_id(FAKESTORE_SOURCE, external_id)
    return existing or await repo.get_by_name(name)


async def ensure_category(db: AsyncSession, name: str) -> tuple[uuid.UUID, bool]:
    """Return the id of the local category for a remote name, creating it if absent.

    The second element is True when a row was inserted.
    """
    external_id = name[:EXTERNAL_ID_LENGTH]
    name = name[:CATEGORY_NAME_LENGTH]
    existing = await _find_category(db, name, external_id)
    if existing:
        return existing.id, False

    category = Category(
        name=name,
        description=f"Products in {name} category",
        is_active=True,
        external_source=FAKESTORE_SOURCE,
        external_id=external_id,
    )
    db.add(category)
    try:
        await db.commit()
    except IntegrityError:
        # A concurrent sync inserted it first
        await db.rollback()
        existing = await _find_category(db, name, external_id)
        if existing is None:
            raise
        return existing.id, False

    logger.info("Imported FakeStore category %r", name)
    return category.id, True


async def sync_categories(db: AsyncSession, client: FakeStoreClient) -> SyncResult:
    try:
        names = await client.fetch_categories()
    except UpstreamUnavailableError as e:
        logger.warning("Category sync aborted: %s", e.detail)
        return SyncResult(imported_count=0, error=e.detail)

    imported = 0
    for name in names:
        _, created = await ensure_category(db, name)
        if created:
            imported += 1

    logger.info(
        "Category sync finished",
        extra={"extra_fields": {"remote": len(names), "imported": imported}},
    )
    return SyncResult(imported_count=imported)


def _to_product(remote: FakeStoreProduct, category_id: uuid.UUID, stock: int) -> Product:
    return Product(
        title=remote.title[:255],
        description=remote.description,
        price=to_money(remote.price),
        image_url=remote.image[:1024],
        category_id=category_id,
        is_active=True,
        stock_quantity=stock,
        external_source=FAKESTORE_SOURCE,
        external_id=str(remote.id),
        external_rating=remote.rating.rate if remote.rating else None,
        external_rating_count=remote.rating.count if remote.rating else None,
    )


async def sync_products(
    db: AsyncSession,
    client: FakeStoreClient,
    *,
    default_stock: Optional[int] = None,
) -> SyncResult:
    if default_stock is None:
        default_stock = get_settings().SYNC_DEFAULT_STOCK

    try:
        remote_products = await client.fetch_products()
    except UpstreamUnavailableError as e:
        logger.warning("Product sync aborted: %s", e.detail)
        return SyncResult(imported_count=0, error=e.detail)

    known = await ProductRepository(db).external_ids(FAKESTORE_SOURCE)
    category_ids: dict[str, uuid.UUID] = {}
    imported = 0

    for remote in remote_products:
        external_id = str(remote.id)
        if external_id in known:
            continue

        if remote.category not in category_ids:
            category_ids[remote.category], _ = await ensure_category(db, remote.category)

        db.add(_to_product(remote, category_ids[remote.category], default_stock))
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            logger.info("FakeStore product %s already imported, skipping", external_id)
            continue

        known.add(external_id)
        imported += 1

    logger.info(
        "Product sync finished",
        extra={"extra_fields": {"remote": len(remote_products), "imported": imported}},
    )
    return SyncResult(imported_count=imported)
