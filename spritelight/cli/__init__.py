"""Command-line interface of SpriteLight."""
