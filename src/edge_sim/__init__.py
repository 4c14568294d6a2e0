"""Monte Carlo simulation of trading edges and risk plans."""

__all__ = ["__version__"]

__version__ = "0.1.0"
