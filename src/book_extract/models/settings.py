"""Tunable extraction settings."""

from pydantic import BaseModel, Field


class ExtractionSettings(BaseModel):
    """Knobs for the extraction heuristics. Defaults match common reader apps."""

    pages_per_chapter: int = Field(default=20, ge=1)
    max_title_length: int = Field(default=200, ge=1)
    base_font_px: float = Field(default=16.0, gt=0)
    pt_to_px: float = Field(default=1.333, gt=0)
    container_path: str = "META-INF/container.xml"
