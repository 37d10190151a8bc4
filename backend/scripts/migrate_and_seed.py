import os
import sys
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

DATABASE_URL = os.environ.get("DATABASE_URL", "")
if not DATABASE_URL:
    print("WARNING: DATABASE_URL not set, skipping migration and seed")
    sys.exit(0)

if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

os.environ["DATABASE_URL"] = DATABASE_URL

from pay_engine.database import engine, Base
from pay_engine.models import db_models  # noqa: F401
from pay_engine.models.db_models import Award
from sqlalchemy.orm import sessionmaker

print("Creating tables...")
Base.metadata.create_all(bind=engine)
print("Tables created.")

# Skip seeding if the catalog sync has already populated the database
_check_session = sessionmaker(bind=engine)()
try:
    award_count = _check_session.query(Award).count()
finally:
    _check_session.close()

if award_count > 0:
    print(f"Database already contains {award_count} awards, skipping seed.")
    sys.exit(0)

from scripts.seed_from_csv import CATALOG_FILES, DEFAULT_SOURCE_DIR, seed_catalog

if not os.path.exists(os.path.join(DEFAULT_SOURCE_DIR, CATALOG_FILES['awards'][0])):
    print("Database is empty and no catalog CSVs are present in data/source/.")
    print("Run a catalog sync (POST /admin/catalog/sync) or add the CSV exports and redeploy.")
    sys.exit(1)

Session = sessionmaker(bind=engine)
session = Session()

try:
    seed_catalog(session)
    print("All done. Database seeded successfully.")
except Exception as e:
    session.rollback()
    print(f"Seed error: {e}")
    raise
finally:
    session.close()
