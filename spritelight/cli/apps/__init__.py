"""Command groups of the SpriteLight CLI."""
