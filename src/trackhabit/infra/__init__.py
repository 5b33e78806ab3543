"""Infrastructure: database wiring, live queries and repositories."""
