from abc import ABC

from ..abstractions import FolioProviders
from ..config import FolioConfig


class Service(ABC):
    def __init__(
        self,
        config: FolioConfig,
        providers: FolioProviders,
    ):
        self.config = config
        self.providers = providers
