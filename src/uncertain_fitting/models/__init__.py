"""Ready-made models with analytic gradients."""

from .exponential import exponential
from .high_pass import high_pass_filter, rc_from_gain
from .line import proportional, straight_line

__all__ = ["exponential", "high_pass_filter", "proportional", "rc_from_gain", "straight_line"]
