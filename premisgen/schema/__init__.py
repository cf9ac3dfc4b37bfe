"""PREMIS v3 schema binding and its XML codec."""

from .codec import XSI_NS, BindingCodec
from .premis_v3 import PREMIS_NS, BoundElement, ObjectFactory

__all__ = ["PREMIS_NS", "XSI_NS", "BindingCodec", "BoundElement", "ObjectFactory"]
