"""
Base types for the image processing package.
"""
from typing import NewType
import numpy as np

# Generated map, uint8
MapData = NewType('MapData', np.ndarray)
