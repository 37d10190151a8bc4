"""
Seed the rate catalog from CSV exports.
Run from the project root:
  python backend/scripts/seed_from_csv.py [source_dir]

Column headers use the catalog sync field names (awardCode, hourlyRate,
effectiveFrom, ...), so every row goes through the same upserts as a live
sync batch.
"""

import csv
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from dotenv import load_dotenv
load_dotenv(os.path.join(os.path.dirname(__file__), '..', '.env'))
load_dotenv()

from sqlalchemy.orm import sessionmaker

from pay_engine.database import engine
from pay_engine.models.db_models import TradeAwardMapping
from pay_engine.models.schemas import (
    AllowanceRuleUpsert,
    AwardUpsert,
    CatalogSyncPayload,
    ClassificationUpsert,
    PayRateUpsert,
    PenaltyRuleUpsert,
    PublicHolidayUpsert,
)
from pay_engine.services.award_rules import DEFAULT_TRADE_AWARD_MAPPINGS, TRADE_MAPPING_VERSION
from pay_engine.services.catalog_sync import apply_catalog_payload

Session = sessionmaker(bind=engine)

DEFAULT_SOURCE_DIR = os.path.join(os.path.dirname(__file__), '..', '..', 'data', 'source')

CATALOG_FILES = {
    'awards': ('awards.csv', AwardUpsert),
    'classifications': ('classifications.csv', ClassificationUpsert),
    'pay_rates': ('pay_rates.csv', PayRateUpsert),
    'penalty_rules': ('penalty_rules.csv', PenaltyRuleUpsert),
    'allowance_rules': ('allowance_rules.csv', AllowanceRuleUpsert),
    'public_holidays': ('public_holidays.csv', PublicHolidayUpsert),
}
TRADE_MAPPING_FILE = 'trade_award_mappings.csv'


def read_rows(csv_path):
    """CSV rows with blank cells dropped so model defaults apply."""
    with open(csv_path, newline='', encoding='utf-8-sig') as f:
        for row in csv.DictReader(f):
            yield {k.strip(): v.strip() for k, v in row.items() if k and v and v.strip()}


def build_payload(source_dir):
    sections = {}
    for section, (filename, model) in CATALOG_FILES.items():
        path = os.path.join(source_dir, filename)
        if not os.path.exists(path):
            print(f"  {filename} not found, skipping")
            continue
        sections[section] = [model.model_validate(row) for row in read_rows(path)]
        print(f"  {filename}: {len(sections[section])} rows")
    return CatalogSyncPayload(**sections)


def seed_trade_mappings(session, source_dir):
    """Load keyword -> award mappings; the packaged defaults are used when no file is supplied."""
    path = os.path.join(source_dir, TRADE_MAPPING_FILE)
    if os.path.exists(path):
        rows = [
            (r['keyword'].lower(), r['awardCode'].upper(), int(r.get('priority', 100)),
             r.get('version', TRADE_MAPPING_VERSION))
            for r in read_rows(path)
        ]
    else:
        rows = [(k, code, priority, TRADE_MAPPING_VERSION) for k, code, priority in DEFAULT_TRADE_AWARD_MAPPINGS]

    count = 0
    for keyword, award_code, priority, version in rows:
        mapping = (
            session.query(TradeAwardMapping)
            .filter(TradeAwardMapping.keyword == keyword, TradeAwardMapping.version == version)
            .one_or_none()
        )
        if mapping is None:
            mapping = TradeAwardMapping(keyword=keyword, version=version)
            session.add(mapping)
        mapping.award_code = award_code
        mapping.priority = priority
        mapping.is_active = True
        count += 1
    session.commit()
    print(f"  → {count} trade mappings seeded")


def seed_catalog(session, source_dir=DEFAULT_SOURCE_DIR):
    print(f"Seeding catalog from {source_dir}...")
    result = apply_catalog_payload(session, build_payload(source_dir))
    print(f"  → {result.model_dump()}")
    seed_trade_mappings(session, source_dir)
    return result


if __name__ == '__main__':
    source = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_SOURCE_DIR
    session = Session()
    try:
        seed_catalog(session, source)
        print("All done. Catalog seeded successfully.")
    finally:
        session.close()
