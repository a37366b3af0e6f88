# File: batchwatch/core/database/base.py

from sqlalchemy.orm import declarative_base

# Registry for the tables we READ from the workflow repository.
# These tables belong to the repository; we never create them in production.
Base = declarative_base()
