"""Business logic: scoring, matching, plans, payments and notifications."""
