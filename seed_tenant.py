"""Seed the default client, its phone line, demo contacts and the inventory.

Usage:
    python seed_tenant.py [--phone-number-id <vapi phone number id>] [--phone-number +1...]

Rows that already exist are left untouched, so the script can be re-run.
"""

import argparse
import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from sqlalchemy import select

from receptionist.persistence.database import AsyncSessionLocal
from receptionist.persistence.models import Client, ClientPhoneLine, Contact, EquipmentItem
from receptionist.settings import settings

DEMO_CONTACTS = [
    ("+16025705474", "Abhave", "Tex Intel HQ", "Cat 336 Excavator", "VIP"),
    ("+15125559999", "Bob Builder", "Austin Construction", "Skid Steer", "New"),
    ("+14695558888", "Sarah Martinez", "Dallas Demolition Co", "Cat D6 Dozer", "VIP"),
    ("+17135557777", "Mike Johnson", "Houston Heavy Haul", "Dump Truck", "New"),
]

INVENTORY = [
    ("Cat 336", "Excavator", 2, 1200, "Excellent", 2022, "36-ton, 268hp, 24ft dig depth"),
    ("Cat 320", "Excavator", 3, 950, "Good", 2021, "20-ton, 121hp, 20ft dig depth"),
    ("Cat D6", "Dozer", 0, 900, "Good", 2020, "160hp, 14ft blade"),
    ("Cat D8", "Dozer", 1, 1400, "Excellent", 2023, "305hp, 16ft blade, GPS ready"),
    ("Bobcat T76", "Skid Steer", 5, 350, "Good", 2021, "74hp, 3,000lb capacity"),
    ("Bobcat S650", "Skid Steer", 4, 300, "Fair", 2019, "74hp, 2,300lb capacity"),
    ("JCB 3CX", "Backhoe", 2, 500, "Good", 2020, "97hp, 4WD, extendable arm"),
    ("Cat 950M", "Loader", 2, 850, "Excellent", 2022, "220hp, 5-yard bucket"),
    ("Volvo A40G", "Dump Truck", 3, 1100, "Good", 2021, "38-ton capacity, articulated"),
    ("Manitowoc 18000", "Crane", 1, 2500, "Excellent", 2023, "440-ton capacity, crawler mounted"),
    ("Bobcat S570", "Skid Steer", 3, 275, "Good", 2020, "66hp, 2,000lb capacity"),
    ("Cat 262D", "Skid Steer", 2, 400, "Excellent", 2023, "90hp, 3,300lb capacity"),
    ("John Deere 332G", "Skid Steer", 4, 380, "Good", 2022, "100hp, 3,700lb capacity"),
    ("Kubota SSV75", "Skid Steer", 2, 320, "Fair", 2019, "74hp, 2,590lb capacity"),
]


async def seed(phone_number_id: str | None, phone_number: str | None) -> None:
    async with AsyncSessionLocal() as session:
        client = await session.get(Client, settings.default_client_id)
        if client:
            print(f"Client already exists: {client.name} ({client.id})")
        else:
            client = Client(
                id=settings.default_client_id,
                name="Tex Intel",
                company="Tex Intel Heavy Equipment",
                sales_phone="+16025705474",
                rentals_phone="+16025705474",
                service_phone="+16025705474",
                parts_phone="+16025705474",
                billing_phone="+16025705474",
                agent_name="Tex",
                enable_inventory=True,
                enable_transfers=True,
            )
            session.add(client)
            print(f"Created client: {client.name} ({client.id})")

        if phone_number_id:
            result = await session.execute(
                select(ClientPhoneLine).where(ClientPhoneLine.vapi_phone_number_id == phone_number_id)
            )
            if result.scalar_one_or_none():
                print(f"Phone line already mapped: {phone_number_id}")
            else:
                session.add(
                    ClientPhoneLine(
                        client_id=client.id,
                        vapi_phone_number_id=phone_number_id,
                        phone_number=phone_number or "",
                    )
                )
                print(f"Mapped phone line {phone_number_id} to {client.id}")

        existing_phones = set((await session.execute(select(Contact.phone_number))).scalars().all())
        for phone, name, company, last_machine, status in DEMO_CONTACTS:
            if phone in existing_phones:
                continue
            session.add(
                Contact(
                    phone_number=phone,
                    name=name,
                    company=company,
                    last_machine=last_machine,
                    status=status,
                )
            )
            print(f"Added contact: {name} ({phone})")

        existing_models = set((await session.execute(select(EquipmentItem.model))).scalars().all())
        added = 0
        for model, category, available, price, condition, year, specs in INVENTORY:
            if model in existing_models:
                continue
            session.add(
                EquipmentItem(
                    model=model,
                    category=category,
                    available=available,
                    price_per_day=price,
                    condition=condition,
                    year=year,
                    specs=specs,
                )
            )
            added += 1
        print(f"Added {added} inventory items")

        await session.commit()


def main():
    parser = argparse.ArgumentParser(description="Seed the default receptionist client and demo data")
    parser.add_argument("--phone-number-id", help="Vapi phone number id to map to the default client")
    parser.add_argument("--phone-number", help="E.164 number of that phone line")
    args = parser.parse_args()
    asyncio.run(seed(args.phone_number_id, args.phone_number))


if __name__ == "__main__":
    main()
