"""
Terminal UI for a Quantumic trading session.

Dark-themed dashboard showing:
- AI chat with the trading agent
- Portfolio, market data and trade history views
"""
