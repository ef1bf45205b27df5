"""Configuration for cmdk."""

from .palette_config import PaletteOptions, load_palette_options

__all__ = ["PaletteOptions", "load_palette_options"]
