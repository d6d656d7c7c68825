from storefront.datastore.engine import close_db, init_db
from storefront.datastore.models import Base, KeyValueDB
from storefront.datastore.repositories import KeyValueRepository

__all__ = ["init_db", "close_db", "Base", "KeyValueDB", "KeyValueRepository"]
