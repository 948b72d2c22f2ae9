from .models import Product
from .loader import build_catalog, load_catalog

__all__ = ["Product", "build_catalog", "load_catalog"]
