"""Runtime configuration for the routing core."""

from routecause.config.routing import RoutingConfig, routing_config

__all__ = ["RoutingConfig", "routing_config"]
