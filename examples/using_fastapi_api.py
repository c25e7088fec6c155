#!/usr/bin/env python
"""Example of using the mongo-lifecycle FastAPI REST API."""

import httpx
import asyncio


async def main():
    """Demonstrate API usage."""
    base_url = "http://localhost:8000/api/v1"

    async with httpx.AsyncClient(timeout=300) as client:
        print("Checking health...")
        response = await client.get(f"{base_url}/health")
        print(f"Health: {response.json()}")

        print("\nCreating backup...")
        response = await client.post(
            f"{base_url}/backups",
            json={"cluster": "prod", "database": "shop", "compress": True}
        )
        backup = response.json()
        print(f"Backup created: {backup['name']} ({backup['sizeBytes']} bytes)")

        print("\nDownloading archive...")
        response = await client.get(f"{base_url}/backups/{backup['name']}/download")
        with open(f"{backup['name']}.zip", "wb") as f:
            f.write(response.content)

        print("\nRestoring into staging...")
        response = await client.post(
            f"{base_url}/backups/restore",
            json={
                "source_path": backup["name"],
                "target_cluster": "staging",
                "target_database": "shop",
                "drop_existing": True,
            }
        )
        print(f"Restored: {response.json()['restoredCollections']}")

        print("\nScheduling nightly backup...")
        response = await client.post(
            f"{base_url}/backups/schedules",
            json={"cluster": "prod", "database": "shop", "pattern": "0 3 * * *", "options": {"compress": True}}
        )
        print(f"Schedule: {response.json()}")

        response = await client.get(f"{base_url}/backups/schedules")
        for schedule in response.json():
            print(f"  {schedule['id']} next run {schedule['nextRun']}")

        print("\nApplying retention...")
        response = await client.post(f"{base_url}/backups/cleanup", json={"retention_days": 30})
        print(f"Removed: {response.json()['removed']}")


if __name__ == "__main__":
    asyncio.run(main())
