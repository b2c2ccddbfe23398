import asyncio

from socialhub.db.recreate_tables import recreate_tables

if __name__ == "__main__":
    print("Recreating database tables...")
    asyncio.run(recreate_tables())
    print("Database tables recreated successfully.")
