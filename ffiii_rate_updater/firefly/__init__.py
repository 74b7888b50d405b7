"""Firefly III API client used to submit exchange rates."""
