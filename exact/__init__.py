from .exact import *
from .roots import *

from . import exact, roots

__all__ = exact.__all__ + roots.__all__
