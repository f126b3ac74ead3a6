"""
Seed the sample hostels.

Usage:
    python -m app.scripts.seed_hostels            # insert missing sample hostels
    python -m app.scripts.seed_hostels --reset    # drop existing hostels first
    python -m app.scripts.seed_hostels --reconcile
"""
import argparse
import logging

from sqlalchemy import delete
from sqlmodel import Session, select

from app.db.db import create_db_and_tables, engine
from app.models.hostel import Hostel
from app.services.hostels import reconcile_all

logger = logging.getLogger(__name__)

SAMPLE_HOSTELS = [
    {
        "name": "Sunrise Hostel",
        "address": {"street": "123 College Street", "city": "Mumbai", "state": "Maharashtra", "zip_code": "400001", "country": "India"},
        "contact_info": {"phone": "+91-22-12345678", "email": "contact@sunrisehostel.com"},
        "total_rooms": 100,
        "facilities": ["WiFi", "Laundry", "Common Kitchen", "Study Room", "Gym"],
        "description": "A modern hostel for students with all essential amenities",
        "university": "Mumbai University",
    },
    {
        "name": "Green Valley Hostel",
        "address": {"street": "456 University Road", "city": "Delhi", "state": "Delhi", "zip_code": "110001", "country": "India"},
        "contact_info": {"phone": "+91-11-87654321", "email": "info@greenvalleyhostel.com"},
        "total_rooms": 150,
        "facilities": ["WiFi", "Laundry", "Common Kitchen", "Library", "Recreation Room"],
        "description": "Eco-friendly hostel with green spaces and modern facilities",
        "university": "Delhi University",
    },
    {
        "name": "Tech Hub Hostel",
        "address": {"street": "789 Innovation Drive", "city": "Bangalore", "state": "Karnataka", "zip_code": "560001", "country": "India"},
        "contact_info": {"phone": "+91-80-11223344", "email": "contact@techhubhostel.com"},
        "total_rooms": 200,
        "facilities": ["High-Speed WiFi", "Co-working Space", "Laundry", "Cafeteria", "24/7 Security"],
        "description": "Perfect for tech students and professionals",
        "university": "Bangalore Institute of Technology",
    },
    {
        "name": "Moonlight Girls Hostel",
        "address": {"street": "321 Women's Campus", "city": "Mumbai", "state": "Maharashtra", "zip_code": "400002", "country": "India"},
        "contact_info": {"phone": "+91-22-98765432", "email": "contact@moonlighthostel.com"},
        "total_rooms": 80,
        "facilities": ["WiFi", "Security", "Common Room", "Study Hall", "Garden"],
        "description": "Safe and secure hostel for female students",
        "university": "Mumbai University",
    },
    {
        "name": "Phoenix Engineering Hostel",
        "address": {"street": "654 Tech Campus", "city": "Bangalore", "state": "Karnataka", "zip_code": "560002", "country": "India"},
        "contact_info": {"phone": "+91-80-55443322", "email": "contact@phoenixhostel.com"},
        "total_rooms": 250,
        "facilities": ["High-Speed WiFi", "Labs", "Workshop", "Cafeteria", "Sports Complex"],
        "description": "State-of-the-art hostel for engineering students",
        "university": "Bangalore Institute of Technology",
    },
]


def seed_hostels(session: Session, reset: bool = False) -> list[Hostel]:
    if reset:
        session.exec(delete(Hostel))
        logger.info("Cleared existing hostels")

    existing = set(session.exec(select(Hostel.name)).all())

    inserted = []
    for data in SAMPLE_HOSTELS:
        if data["name"] in existing:
            continue
        hostel = Hostel(**data)
        session.add(hostel)
        inserted.append(hostel)

    session.commit()

    for hostel in inserted:
        session.refresh(hostel)
        logger.info("Inserted %s (id=%s, %s)", hostel.name, hostel.id, hostel.university)

    return inserted


def main(argv=None):
    parser = argparse.ArgumentParser(description="Seed Fretio sample hostels")
    parser.add_argument("--reset", action="store_true", help="delete existing hostels first")
    parser.add_argument("--reconcile", action="store_true", help="recompute hostel counters instead of seeding")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    create_db_and_tables()

    with Session(engine) as session:
        if args.reconcile:
            reconcile_all(session)
        else:
            inserted = seed_hostels(session, reset=args.reset)
            logger.info("%d hostels inserted", len(inserted))


if __name__ == "__main__":
    main()
