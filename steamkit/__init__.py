"""Steam IDs, social caches, connection server lists, web trading and trade offer parsing."""

__version__ = "0.1.0"
__all__ = ["steamid", "socialcache", "servers", "econ", "tradeapi", "trade", "tradeoffer"]