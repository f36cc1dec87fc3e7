from ..config import FolioConfig
from .builder import FolioBuilder
from .factory import FolioProviderFactory

__all__ = [
    "FolioBuilder",
    "FolioConfig",
    "FolioProviderFactory",
]
