"""Helper runner for the qtrn command line.

Sets up the local src/ path so you can run without installing the package:

    python run.py chart AAPL -s 2016-12-01 -e 2017-06-20 -i 1d
"""
import os
import sys

ROOT = os.path.dirname(__file__)
SRC = os.path.join(ROOT, "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from qtrn.cli import main


if __name__ == '__main__':
    main()
