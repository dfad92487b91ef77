#!/usr/bin/env python3
"""
Backfill CRM contacts from call history for the caller's workspace.

Usage:
    CRM_URL=https://crm.rapidcall.ai AUTH_TOKEN=... python run_backfill.py
"""

import asyncio
import os
import sys

import httpx


async def run_backfill():
    """Trigger a contact backfill through the CRM API."""
    api_url = os.getenv("CRM_URL", "http://localhost:8788")
    token = os.getenv("AUTH_TOKEN")
    if not token:
        print("❌ AUTH_TOKEN is required (a session token for the workspace owner)")
        return 1

    print(f"🚀 Starting contact backfill...")
    print(f"   API: {api_url}")
    print()

    try:
        # Backfill runs inside the request, allow it time for large workspaces
        async with httpx.AsyncClient(timeout=300.0) as client:
            response = await client.post(
                f"{api_url}/api/crm/contacts/backfill",
                headers={"Authorization": f"Bearer {token}"},
            )

            if response.status_code == 200:
                data = response.json()
                print(f"✅ Backfill complete!")
                print(f"   Created: {data.get('created', 0)}")
                print(f"   Updated: {data.get('updated', 0)}")
                return 0
            else:
                print(f"❌ Backfill failed")
                print(f"   Status: {response.status_code}")
                print(f"   Response: {response.text}")
                return 1

    except httpx.HTTPError as e:
        print(f"❌ Error running backfill: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(asyncio.run(run_backfill()))
