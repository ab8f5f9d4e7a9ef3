import httpx
import asyncio
import os

PORT = os.environ.get("APP_PORT", "8080")

async def verify_api():
    """Smoke test against a running server: create, read lyrics, update, list, delete."""
    base = f"http://127.0.0.1:{PORT}"
    payload = {
        "group": "Muse",
        "song": "Supermassive Black Hole"
    }

    print(f"Sending request to {base}/songs with {payload}...")
    try:
        async with httpx.AsyncClient(base_url=base, trust_env=False, timeout=30.0) as client:
            response = await client.post("/songs", json=payload)
            print(f"Status Code: {response.status_code}")
            if response.status_code != 200:
                print(f"Error Response: {response.text}")
                return

            song_id = response.json()["song_id"]
            print(f"Created song ID {song_id}")

            response = await client.get(f"/songs/{song_id}/lyrics", params={"page": 1, "limit": 2})
            print(f"First verses: {response.json()}")

            response = await client.put(f"/songs/{song_id}", json={**payload, "releaseDate": "16.07.2006"})
            print(f"Update: {response.status_code} {response.json()}")

            response = await client.get("/songs", params={"group": "muse"})
            print(f"Songs matching 'muse': {[s['id'] for s in response.json()]}")

            response = await client.delete(f"/songs/{song_id}")
            print(f"Delete: {response.status_code} {response.json()}")

            response = await client.delete(f"/songs/{song_id}")
            if response.status_code == 404:
                print("\n✅ Verification SUCCESS: full song lifecycle works.")
            else:
                print(f"\n❌ Verification FAILED: second delete returned {response.status_code}")
    except Exception as e:
        print(f"Request Failed: {e}")

if __name__ == "__main__":
    asyncio.run(verify_api())
