from .PointsAndRects import Point2f
from .RepeatingTimer import RepeatingTimer
