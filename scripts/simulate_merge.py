import asyncio
import sys
import time

import httpx

URL = "http://localhost:8000/api/merge-audio"


async def send_merge(download_url: str, prospect_name: str):
    payload = {
        "downloadURL": download_url,
        "prospectName": prospect_name,
        "timestamp": str(int(time.time())),
    }
    # Both Cloudinary uploads happen inside the request
    async with httpx.AsyncClient(timeout=120) as client:
        resp = await client.post(URL, json=payload)
        print(f"Merge for {prospect_name}: {resp.status_code} {resp.json()}")


async def main():
    download_url = sys.argv[1] if len(sys.argv) > 1 else "https://example.com/greeting.mp3"
    prospect_name = sys.argv[2] if len(sys.argv) > 2 else "Jo Ann"
    await send_merge(download_url, prospect_name)

if __name__ == "__main__":
    asyncio.run(main())
