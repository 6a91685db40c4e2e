from .NodeRegistry import Catalog, CatalogEntry, TEMPLATES, block, default_catalog

__all__ = ["Catalog", "CatalogEntry", "TEMPLATES", "block", "default_catalog"]
