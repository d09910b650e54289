"""Club Logo Storage.

Stores one or more renditions per logo UUID:
- svg: vector original (when uploaded as SVG)
- png: raster rendition, converted from SVG/PDF when needed

SVG rasterization tries ImageMagick, then Inkscape, then an embedded
Pillow renderer. PDF needs ImageMagick + Ghostscript.
"""

from app.logos.pipeline import RenditionPipeline, RenditionSet, SourceFormat, get_rendition_pipeline

__all__ = ["RenditionPipeline", "RenditionSet", "SourceFormat", "get_rendition_pipeline"]
