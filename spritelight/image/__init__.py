"""
SpriteLight image package.

  - Map generators: NormalMapGenerator, ParallaxMapGenerator,
    SpecularMapGenerator, OcclusionMapGenerator
  - Registry: MapGeneratorRegistry and generate_map
  - File I/O: load_image_file, save_image
"""

from .factory import MapGeneratorRegistry, generate_map, register_generator
from .io import load_image_file, save_image, is_image_file

def get_available_map_types():
    """
    Get a list of available map kinds.

    Returns:
        List[str]: Registered map kind names
    """
    return MapGeneratorRegistry.list()
