from . import dev, submissions

__all__ = ["dev", "submissions"]
