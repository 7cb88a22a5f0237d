"""Example script: fetch a ticker with the fetcher and print the chart points.

This script is for local use. It will attempt to download if yfinance is available.
"""
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from qtrn.fetcher import fetch, parse_date
from qtrn.models import ChartRequest, Interval


def main():
    request = ChartRequest('AAPL', start=parse_date('2016-12-01'), end=parse_date('2017-06-20'),
                           interval=Interval.WEEK)
    print('Fetching', request.symbol)
    series = fetch(request)
    for point in series:
        print(f'{point.label:>10}  {point.close:.2f}')
    print(f'{len(series)} points')


if __name__ == '__main__':
    main()
