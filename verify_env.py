import asyncio
import os

from dotenv import load_dotenv
import httpx
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine

from vetclinic.core.database import resolve_async_database_url

# 1. Load the .env file
load_dotenv()

DB_LABELS = {
    "postgresql": "PostgreSQL",
    "mysql": "MySQL",
    "sqlite": "SQLite (tests)",
}

HEALTH_QUERIES = {
    "postgresql": "SELECT version();",
    "mysql": "SELECT VERSION();",
}


async def verify_database():
    print("-" * 30)
    db_url = os.getenv("DATABASE_URL")
    if not db_url:
        print("❌ Error: DATABASE_URL is not set")
        return False

    try:
        async_url = resolve_async_database_url(db_url)
        url = make_url(async_url)
    except Exception as exc:  # noqa: BLE001 - surface clear setup errors
        print(f"❌ Unsupported database configuration: {exc}")
        return False

    backend = url.get_backend_name()
    label = DB_LABELS.get(backend, backend)
    print(f"🔍 Checking {label} connection...")
    print(f"ℹ️  DSN: {url.render_as_string(hide_password=True)}")

    query = HEALTH_QUERIES.get(backend, "SELECT 1")

    try:
        engine = create_async_engine(async_url, echo=False)
        async with engine.connect() as conn:
            result = await conn.execute(text(query))
            version = result.scalar()
            print(f"✅ {label} connection OK! Returned: {version}")
        await engine.dispose()
        return True
    except Exception as e:  # noqa: BLE001 - surface connection failure
        print(f"❌ {label} connection failed: {e}")
        return False


async def verify_sms_gateway():
    print("-" * 30)
    print("🔍 Checking SMS gateway configuration...")
    api_key = os.getenv("SMS_API_KEY")
    if not api_key:
        print("❌ Error: SMS_API_KEY is not set; reminders will be logged as failed")
        return False

    api_url = os.getenv("SMS_API_URL", "https://api.semaphore.co/api/v4/messages")
    print(f"ℹ️  SMS_API_URL: {api_url}")

    # Only checks reachability; no message is sent.
    try:
        async with httpx.AsyncClient(timeout=5.0) as client:
            response = await client.get(api_url, params={"apikey": api_key, "limit": 1})
        print(f"✅ SMS gateway reachable (HTTP {response.status_code})")
        return True
    except httpx.HTTPError as e:
        print(f"❌ SMS gateway unreachable: {e}")
        return False


async def main():
    print("🚀 Verifying environment configuration...")

    db_ok = await verify_database()
    sms_ok = await verify_sms_gateway()

    print("-" * 30)
    if db_ok and sms_ok:
        print("🎉 All core services are configured correctly.")
    else:
        print("⚠️  Warning: some checks failed, review your .env file.")

if __name__ == "__main__":
    asyncio.run(main())
