"""Check the database connection and create any missing account tables.

Usage (after `pip install -e .`): python scripts/init_db.py
Reads DATABASE_URL / POSTGRES_* from the environment or .env.
"""
import sqlalchemy

from app.core.config import settings
from app.infrastructure.database import Database

print('SQLAlchemy version:', sqlalchemy.__version__)
database = Database.from_settings(settings)
print('engine url:', database.engine.url.render_as_string(hide_password=True))
try:
    with database.connect() as conn:
        r = conn.execute(sqlalchemy.text('SELECT 1'))
        print('connection ok:', r.scalar() == 1)
    database.create_schema()
    print('schema ready')
finally:
    database.dispose()
