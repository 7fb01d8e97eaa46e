"""
Macro Market Dashboard Analytics

Time-series analytics behind an educational market-data dashboard:
inflation (CPI), exchange rate (USD/INR) and equity index (NIFTY 50)
series merged by date, summarised, correlated, and binned for charts.
"""

__version__ = "0.1.0"
