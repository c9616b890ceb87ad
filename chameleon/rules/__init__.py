from chameleon.rules.loader import load_rules
from chameleon.rules.models import Rules, default_rules

__all__ = ["Rules", "default_rules", "load_rules"]
