"""SheetNest - polygon nesting onto rectangular material sheets."""

__version__ = "0.1.0"
