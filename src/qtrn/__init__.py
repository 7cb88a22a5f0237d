"""qtrn package: historical stock charts drawn inside the terminal.

This package provides:
- fetcher: download daily/weekly/monthly bars from yfinance and shape them into a chart series
- chart: an ASCII line chart widget drawn with curses, shown until a key is pressed
- cli: the `qtrn chart` command
"""

__version__ = "0.1.0"
