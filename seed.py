"""
Seed script -- populates the charger table with a curated sample for reviewers.

Run after migrations:
    python seed.py

Creates one or two hand-verified HPC sites per corridor segment, with the
fields ingestion cannot fill in (highway proximity, amenities, notes).
Coordinates are approximate.
"""

import asyncio

from sqlalchemy import text

from echarger.domain.corridor import classify_on_route, segment_for_point
from echarger.infrastructure.database import async_session_factory, engine
from echarger.infrastructure.models import ChargerModel
from echarger.infrastructure.repositories import ewkt_point


CHARGERS = [
    {"name": "Fastned Breda A16", "lat": 51.5605, "lng": 4.7405, "network": "Fastned",
     "power_kw": 300, "proximity": "at_exit", "amenities": "coffee,toilets", "country": "NL",
     "connectors": "CCS,CHAdeMO", "count": 8},
    {"name": "Ionity Antwerpen Zuid", "lat": 51.1840, "lng": 4.3950, "network": "Ionity",
     "power_kw": 350, "proximity": "near_exit", "amenities": "food,toilets", "country": "BE",
     "connectors": "CCS", "count": 6},
    {"name": "Tesla Supercharger Mons", "lat": 50.4490, "lng": 3.9450, "network": "Tesla",
     "power_kw": 250, "proximity": "near_exit", "amenities": "shop", "country": "BE",
     "connectors": "CCS", "count": 12},
    {"name": "TotalEnergies Aire d'Assevillers", "lat": 49.9040, "lng": 2.8470,
     "network": "TotalEnergies", "power_kw": 175, "proximity": "at_exit",
     "amenities": "food,coffee,toilets,shop", "country": "FR", "connectors": "CCS", "count": 4},
    {"name": "Ionity Aire de Limours Janvry", "lat": 48.6280, "lng": 2.1290, "network": "Ionity",
     "power_kw": 350, "proximity": "at_exit", "amenities": "food,toilets", "country": "FR",
     "connectors": "CCS", "count": 6},
    {"name": "Ionity Aire de Vierzon Nord", "lat": 47.2510, "lng": 2.0570, "network": "Ionity",
     "power_kw": 350, "proximity": "at_exit", "amenities": "coffee,toilets", "country": "FR",
     "connectors": "CCS", "count": 4},
    {"name": "Tesla Supercharger Saint-Flour", "lat": 45.0380, "lng": 3.1010, "network": "Tesla",
     "power_kw": 250, "proximity": "near_exit", "amenities": "hotel,food", "country": "FR",
     "connectors": "CCS", "count": 8},
    {"name": "Ionity Aire du Viaduc de Millau", "lat": 44.0610, "lng": 3.0260, "network": "Ionity",
     "power_kw": 350, "proximity": "at_exit", "amenities": "food,toilets,shop", "country": "FR",
     "connectors": "CCS", "count": 4},
    {"name": "Iberdrola Area La Jonquera", "lat": 42.4110, "lng": 2.8760, "network": "Iberdrola",
     "power_kw": 150, "proximity": "near_exit", "amenities": "food,coffee", "country": "ES",
     "connectors": "CCS,CHAdeMO", "count": 4},
    {"name": "Tesla Supercharger Castellón", "lat": 39.9960, "lng": -0.0690, "network": "Tesla",
     "power_kw": 250, "proximity": "town", "amenities": "shop,wifi", "country": "ES",
     "connectors": "CCS", "count": 10},
    {"name": "Iberdrola Elche Parque Empresarial", "lat": 38.2850, "lng": -0.6020,
     "network": "Iberdrola", "power_kw": 180, "proximity": "town", "amenities": "coffee",
     "country": "ES", "connectors": "CCS", "count": 2},
]


async def seed():
    async with async_session_factory() as session:
        # Check if already seeded
        result = await session.execute(text("SELECT count(*) FROM chargers"))
        if result.scalar() > 0:
            print("Database already seeded. Skipping.")
            return

        for c in CHARGERS:
            session.add(
                ChargerModel(
                    name=c["name"],
                    latitude=c["lat"],
                    longitude=c["lng"],
                    location=ewkt_point(c["lat"], c["lng"]),
                    network=c["network"],
                    power_kw=c["power_kw"],
                    connector_types=c["connectors"],
                    num_chargers=c["count"],
                    highway_proximity=c["proximity"],
                    route_segment=segment_for_point(c["lat"], c["lng"]).value,
                    on_route=classify_on_route(c["lat"], c["lng"]).value,
                    country=c["country"],
                    amenities=c["amenities"],
                    status="verified",
                    reliability=4.5,
                    notes="Seeded sample site.",
                )
            )
        await session.commit()
        print(f"  Created {len(CHARGERS)} chargers")
        print("\nSeed complete!")


async def main():
    print("Seeding database...")
    await seed()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
