#!/usr/bin/env python3
"""
SMC Trader Entry Point

Run this script to validate a strategy config or analyze bar files:

    python main.py check
    python main.py analyze --symbol EURUSD --point-size 0.00001 --bars M5=m5.csv ...
"""

import sys

from smc_trader.bot import main


if __name__ == "__main__":
    sys.exit(main())
