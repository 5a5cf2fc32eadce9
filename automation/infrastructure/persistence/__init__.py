"""SQLAlchemy persistence: engine, ORM models and repositories."""
