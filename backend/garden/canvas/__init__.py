"""Drawing capture and canonical artifact export."""

from garden.canvas.export import EXPORT_SIZE, Artifact, export
from garden.canvas.surface import DISPLAY_SIZE, BoundingRect, CaptureSurface, Point

__all__ = [
    "Artifact",
    "BoundingRect",
    "CaptureSurface",
    "DISPLAY_SIZE",
    "EXPORT_SIZE",
    "Point",
    "export",
]
