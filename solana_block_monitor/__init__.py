"""Monitor confirmed Solana blocks and serve slot-confirmation checks over HTTP."""

__version__ = "0.1.0"