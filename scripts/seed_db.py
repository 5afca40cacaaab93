import sys
import os
import argparse
import logging

# Add src to sys.path to allow imports
sys.path.append(os.path.join(os.path.dirname(__file__), '../src'))

from partbom.database import SessionLocal, init_db, engine
from partbom.config import get_settings
from partbom.bom_engine.services.sequence_service import SequenceService
from partbom.seeder import SeederRegistry
from partbom.models.base import Base

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger("partbom.seeder")

def drop_all_tables(target_engine, force=False):
    """Drops all tables after confirmation."""
    if not force:
        print("WARNING: You are about to DROP ALL parts, BOM links and audit entries.")
        response = input("Type 'yes' to confirm: ")
        if response.lower() != 'yes':
            logger.info("Operation cancelled.")
            sys.exit(0)

    logger.warning("Dropping all tables...")
    Base.metadata.drop_all(bind=target_engine)
    logger.info("All tables dropped.")

def main():
    parser = argparse.ArgumentParser(description="Seed the PartBOM database with sample data.")
    parser.add_argument("--include", action="append", default=[],
                        help="Optional seeder to run as well (e.g. RandomBOMSeeder); repeatable")
    parser.add_argument("--drop-all", action="store_true", help="Drop all tables before seeding (Dangerous!)")
    parser.add_argument("--force", action="store_true", help="Skip confirmation prompt for --drop-all")
    args = parser.parse_args()

    settings = get_settings()
    logger.info(f"Seeding {settings.DATABASE_URL} ({settings.ENVIRONMENT})")

    if args.drop_all:
        drop_all_tables(engine, force=args.force)

    init_db(create_tables=True, bind_engine=engine)

    session = SessionLocal()
    try:
        SequenceService(session).sync_from_records()
        session.commit()
        completed = SeederRegistry.run_all(session, include=args.include)
        logger.info(f"Seeding completed: {', '.join(completed) or 'none'}")
    except Exception as e:
        logger.exception(f"Seeding failed: {e}")
        sys.exit(1)
    finally:
        session.close()

if __name__ == "__main__":
    main()
