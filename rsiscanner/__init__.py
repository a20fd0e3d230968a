"""RSI Scanner - multi-symbol RSI monitoring with alerts and chart annotations."""

__version__ = "0.1.0"
