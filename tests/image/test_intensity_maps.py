"""Unit tests for the specular and occlusion map generators."""

import unittest

import numpy as np

from spritelight.core.parameters import ParameterSet
from spritelight.exceptions import DimensionMismatchError
from spritelight.image.maps.occlusion import OcclusionMapGenerator
from spritelight.image.maps.specular import SpecularMapGenerator
from tests.resources import create_pattern_sprite, create_sample_sprite, create_square_sprite


class TestSpecularMapGenerator(unittest.TestCase):
    """Test cases for SpecularMapGenerator."""

    def setUp(self):
        self.generator = SpecularMapGenerator()
        self.bright = create_sample_sprite((8, 8), (200, 200, 200))
        self.dark = create_sample_sprite((8, 8), (100, 100, 100))
        self.square = create_square_sprite((16, 16), margin=4)

    def test_output_shape_and_type(self):
        result = self.generator.generate(self.bright)
        self.assertEqual(result.shape, (8, 8))
        self.assertEqual(result.dtype, np.uint8)

    def test_threshold_keeps_bright_pixels(self):
        self.assertTrue(np.all(self.generator.generate(self.bright) == 200))
        self.assertTrue(np.all(self.generator.generate(self.dark) == 0))

    def test_lower_threshold(self):
        result = self.generator.generate(self.dark, ParameterSet(specular_thresh=50))
        self.assertTrue(np.all(result == 100))

    def test_brightness_and_contrast(self):
        params = ParameterSet(specular_thresh=0, specular_bright=20, specular_contrast=2.0)
        result = self.generator.generate(self.dark, params)
        # 2 * (100 - 128) + 128 + 20
        self.assertTrue(np.all(result == 92))

    def test_invert(self):
        result = self.generator.generate(self.dark, ParameterSet(specular_invert=True))
        self.assertTrue(np.all(result == 255))

    def test_transparent_pixels_are_zero(self):
        params = ParameterSet(specular_thresh=0, specular_invert=True, specular_blur=2)
        result = self.generator.generate(self.square, params)
        self.assertEqual(result[0, 0], 0)
        self.assertEqual(result[3, 8], 0)
        self.assertGreater(result[8, 8], 0)

    def test_specular_override(self):
        result = self.generator.generate(self.dark, specular=self.bright)
        self.assertTrue(np.all(result == 200))

    def test_specular_override_size_mismatch(self):
        with self.assertRaises(DimensionMismatchError):
            self.generator.generate(self.dark, specular=create_sample_sprite((4, 4)))

    def test_blur_softens_edges(self):
        sprite = create_pattern_sprite((16, 16), "checker")
        sharp = self.generator.generate(sprite, ParameterSet(specular_thresh=0))
        soft = self.generator.generate(sprite, ParameterSet(specular_thresh=0, specular_blur=2))
        self.assertLess(soft.std(), sharp.std())


class TestOcclusionMapGenerator(unittest.TestCase):
    """Test cases for OcclusionMapGenerator."""

    def setUp(self):
        self.generator = OcclusionMapGenerator()
        self.grey = create_sample_sprite((8, 8), (128, 128, 128))
        self.square = create_square_sprite((16, 16), margin=4)

    def test_luminance_mode(self):
        result = self.generator.generate(self.grey)
        self.assertEqual(result.shape, (8, 8))
        self.assertTrue(np.all(result == 128))

    def test_threshold(self):
        result = self.generator.generate(self.grey, ParameterSet(occlusion_thresh=200))
        self.assertTrue(np.all(result == 0))

    def test_invert(self):
        result = self.generator.generate(self.grey, ParameterSet(occlusion_invert=True))
        self.assertTrue(np.all(result == 127))

    def test_distance_mode(self):
        params = ParameterSet(occlusion_distance_mode=True, occlusion_distance=2)
        result = self.generator.generate(self.square, params)
        self.assertEqual(result[0, 0], 0)
        self.assertEqual(result[8, 8], 255)
        self.assertTrue(100 < result[4, 8] < 160)

    def test_distance_mode_ignores_colour(self):
        params = ParameterSet(occlusion_distance_mode=True, occlusion_distance=3)
        dark = create_square_sprite((16, 16), margin=4, color=(10, 10, 10))
        np.testing.assert_array_equal(
            self.generator.generate(self.square, params),
            self.generator.generate(dark, params),
        )

    def test_generation_is_deterministic(self):
        params = ParameterSet(occlusion_blur=3, occlusion_contrast=1.5)
        first = self.generator.generate(self.square, params)
        second = self.generator.generate(self.square, params)
        np.testing.assert_array_equal(first, second)


if __name__ == "__main__":
    unittest.main()
