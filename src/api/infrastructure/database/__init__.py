"""Database infrastructure - async engine, sessions and ORM base."""
