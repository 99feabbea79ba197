"""System constants and default values."""

from decimal import Decimal

# File names (inside the configured data directory)
DEFAULT_DATA_DIR = "trading_data"
TRANSACTION_LOG_NAME = "transactions.csv"
HOLDINGS_DUMP_NAME = "portfolios.csv"
PRICE_HISTORY_EXPORT_TEMPLATE = "price_history_{symbol}.csv"
VALUATION_EXPORT_TEMPLATE = "portfolio_snapshots_{user_id}.csv"

# Record layouts for the persistence sink (plain comma-separated, no quoting)
TRANSACTION_LOG_COLUMNS = ['user_id', 'symbol', 'quantity', 'price', 'timestamp']
PRICE_HISTORY_EXPORT_COLUMNS = ['timestamp', 'price']
VALUATION_EXPORT_COLUMNS = ['time', 'value']

# Accounts
DEFAULT_STARTING_CASH = Decimal('10000.00')
AFFORDABILITY_EPSILON = Decimal('1e-9')

# Price simulation
MAX_TICK_PERCENT = Decimal('2')
MIN_PRICE = Decimal('0.01')
PRICE_PRECISION = Decimal('0.0001')

# Bounded histories
PRICE_HISTORY_CAPACITY = 1000
VALUATION_HISTORY_CAPACITY = 1000
DETAIL_HISTORY_POINTS = 10

# Scheduling (seconds)
DEFAULT_TICK_INTERVAL_SECONDS = 3
DEFAULT_SNAPSHOT_INTERVAL_SECONDS = 30
MAX_JOB_LOG_ENTRIES = 50

# Instruments seeded into a fresh market
DEFAULT_INSTRUMENTS = [
    {'symbol': 'AAPL', 'name': 'Apple Inc.', 'price': '170.00'},
    {'symbol': 'GOOGL', 'name': 'Alphabet Inc.', 'price': '135.00'},
    {'symbol': 'MSFT', 'name': 'Microsoft Corp.', 'price': '310.00'},
    {'symbol': 'TSLA', 'name': 'Tesla Inc.', 'price': '250.00'},
    {'symbol': 'INFY', 'name': 'Infosys Ltd.', 'price': '22.00'},
]

# Logging configuration
LOG_FILE = "trading_platform.log"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Version information
VERSION = "1.0.0"

# Repository configuration
DEFAULT_REPOSITORY_TYPE = "csv"

# Error messages
ERROR_USER_NOT_FOUND = "User not found. Please register/login first."
ERROR_SYMBOL_NOT_FOUND = "Stock not found"
ERROR_INVALID_QUANTITY = "Quantity must be a positive whole number"
ERROR_INSUFFICIENT_FUNDS = "Insufficient cash"
ERROR_INSUFFICIENT_HOLDINGS = "Not enough holdings to sell"
