# notegraph/models/layout.py
from pydantic import BaseModel, Field

from notegraph.core.layout_config import (
    ATTRACTION_STRENGTH,
    DAMPING,
    LAYOUT_ITERATIONS,
    LAYOUT_SPREAD,
    MIN_EDGE_DISTANCE,
    REPULSION_CUTOFF,
    REPULSION_STRENGTH,
)

class LayoutSettings(BaseModel):
    spread: float = Field(default=LAYOUT_SPREAD, gt=0)
    iterations: int = Field(default=LAYOUT_ITERATIONS, ge=0)
    repulsion_strength: float = REPULSION_STRENGTH
    repulsion_cutoff: float = Field(default=REPULSION_CUTOFF, gt=0)
    attraction_strength: float = ATTRACTION_STRENGTH
    min_distance: float = Field(default=MIN_EDGE_DISTANCE, ge=0)
    damping: float = Field(default=DAMPING, ge=0, le=1)
    # Push coincident pairs apart instead of skipping them.
    jitter_coincident: bool = False
