import argparse
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from onlinejudge.db.session import SessionLocal, init_db
from onlinejudge.services.seed_service import seed_sample_problems


def main():
    parser = argparse.ArgumentParser(description="Create the database tables and insert the sample problems.")
    parser.add_argument("--skip-create", action="store_true",
                        help="Do not create missing tables before seeding.")
    args = parser.parse_args()

    if not args.skip_create:
        init_db()

    db = SessionLocal()
    try:
        created = seed_sample_problems(db)
        if created:
            print(f"SUCCESS: Seeded {created} sample problems.")
        else:
            print("Problems already exist; nothing was seeded.")
    finally:
        db.close()


if __name__ == "__main__":
    main()
