"""Typed wrappers around individual KSeF API endpoints."""
