"""JSON persistence for the platform state."""

from certification.store.state_repository import load_platform, save_platform

__all__ = ["load_platform", "save_platform"]
