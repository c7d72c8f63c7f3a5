"""
SupportDesk — a streaming customer-support chat relay and client.
"""

__version__ = "0.3.0"
