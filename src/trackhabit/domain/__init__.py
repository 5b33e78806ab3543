"""Domain types: milestones, sort orders, settings and repository protocols."""
