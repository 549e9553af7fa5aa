"""Client-side helpers for talking to the SocialHub API."""
from .api import SocialClient
from .errors import SocialClientError
from .optimistic import OptimisticToggle, ToggleState, apply_optimistic

__all__ = ["SocialClient", "SocialClientError", "OptimisticToggle", "ToggleState", "apply_optimistic"]
