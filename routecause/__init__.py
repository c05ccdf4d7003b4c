"""RouteCause: multi-leg trip routing on top of a metered routing provider."""

__version__ = "1.0.0"
