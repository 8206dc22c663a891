# spotlight/db/base_class.py

from sqlalchemy.orm import declarative_base

# Single declarative base shared by every Spotlight model.
Base = declarative_base()
