"""User feature: endpoints, lifecycle flows and persistence."""
