"""UNO rules engine with a websocket room relay."""

__version__ = "0.1.0"
