"""Owner accounts and authentication."""
