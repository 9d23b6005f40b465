from dataclasses import dataclass

@dataclass(frozen=True)
class Point2f:
    x: float
    y: float

    def __add__(self, other: "float | Point2f") -> "Point2f":
        """Add another Point2f or scalar to this point."""
        if isinstance(other, Point2f):
            return Point2f(self.x + other.x, self.y + other.y)
        return Point2f(self.x + other, self.y + other)

    def __truediv__(self, other: "float | Point2f") -> "Point2f":
        """Divide this point by another Point2f or scalar."""
        if isinstance(other, Point2f):
            return Point2f(self.x / other.x, self.y / other.y)
        return Point2f(self.x / other, self.y / other)

    def lerp(self, other: "Point2f", t: float) -> "Point2f":
        """Linearly interpolate between this point and another by t (0.0 to 1.0)."""
        return Point2f(
            x=self.x + (other.x - self.x) * t,
            y=self.y + (other.y - self.y) * t
        )
