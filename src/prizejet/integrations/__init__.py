"""Third-party integrations for Pro campaigns."""
