from dependency_injector import containers, providers
from app.core.settings import settings
from app.core.realtime import ConnectionManager
from app.storage.database import build_engine
from app.storage.document_store import SqlDocumentStore
from app.v1_0.repositories import (
    ProductRepository,
    SaleRepository,
    )
from app.v1_0.services import (
    InventoryLedger,
    SaleJournal,
    RemoteSynchronizer,
    StallService,
    )

class APIContainer(containers.DeclarativeContainer):
    engine = providers.Singleton(build_engine, database_url=settings.DATABASE_URL)
    document_store = providers.Singleton(SqlDocumentStore, engine=engine)
    realtime_manager = providers.Singleton(ConnectionManager)

    product_repository = providers.Singleton(ProductRepository, store=document_store)
    sale_repository = providers.Singleton(SaleRepository, store=document_store)

    inventory_ledger = providers.Singleton(
        InventoryLedger,
        oversell_policy=settings.OVERSELL_POLICY
    )
    sale_journal = providers.Singleton(
        SaleJournal,
        ledger=inventory_ledger
    )
    remote_synchronizer = providers.Singleton(
        RemoteSynchronizer,
        store=document_store,
        ledger=inventory_ledger,
        journal=sale_journal,
        product_repository=product_repository,
        sale_repository=sale_repository,
        realtime_manager=realtime_manager,
        channel_id=settings.REALTIME_CHANNEL
    )
    stall_service = providers.Singleton(
        StallService,
        ledger=inventory_ledger,
        journal=sale_journal,
        synchronizer=remote_synchronizer,
        product_repository=product_repository,
        sale_repository=sale_repository,
        missing_product_label=settings.MISSING_PRODUCT_LABEL,
        currency=settings.CURRENCY,
        display_timezone=settings.DISPLAY_TIMEZONE
    )
