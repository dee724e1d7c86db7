from .build_selector import build_network_selector, build_nominator_registry

__all__ = [
    "build_network_selector",
    "build_nominator_registry",
]
