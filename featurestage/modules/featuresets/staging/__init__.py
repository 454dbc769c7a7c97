from .naming import map_name
from .stager import Stager

__all__ = ["map_name", "Stager"]
