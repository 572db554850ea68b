"""Operations core for a multi-branch wellness clinic: pricing, scheduling, billing."""

__version__ = "0.1.0"
