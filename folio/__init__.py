from .base import *
from .main import *
from .providers import *

__version__ = "0.1.0"
