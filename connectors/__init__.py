"""
connectors — OAuth2 integration module for the upstream vendors.

Provides:
  • vendor token-exchange strategies (authorization code, refresh)
  • per-session credentials with a single-flight refresh
  • the authenticated request executor (one refresh-and-retry per call)
  • cursor pagination over the executor

Each vendor (QuickBooks, Microsoft, …) is a subclass of BaseConnector.
"""
