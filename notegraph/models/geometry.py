# notegraph/models/geometry.py
import math
from pydantic import BaseModel, Field

class Point(BaseModel):
    x: float
    y: float

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)

class ViewportSize(BaseModel):
    width: float
    height: float

    @property
    def center(self) -> Point:
        return Point(x=self.width / 2, y=self.height / 2)

class ViewTransform(BaseModel):
    """
    Affine pan/zoom applied by the viewer, mapping graph space to screen space:

        screen_x = a * x + c * y + tx
        screen_y = b * x + d * y + ty
    """
    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    tx: float = 0.0
    ty: float = 0.0

    @classmethod
    def identity(cls) -> "ViewTransform":
        return cls()

    @classmethod
    def pan_zoom(cls, scale: float, tx: float = 0.0, ty: float = 0.0) -> "ViewTransform":
        return cls(a=scale, d=scale, tx=tx, ty=ty)

    @property
    def determinant(self) -> float:
        return self.a * self.d - self.b * self.c

    def entries(self) -> tuple[float, ...]:
        return (self.a, self.b, self.c, self.d, self.tx, self.ty)

class HitTestRequest(BaseModel):
    point: Point
    transform: ViewTransform = Field(default_factory=ViewTransform)
    viewport: ViewportSize
    visible_node_ids: list[str] | None = None
