import os

# Use memory database for tests
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["ORM"] = "peewee"
