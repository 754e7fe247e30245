import sys
import httpx

base_url = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8000"

resp = httpx.get(f"{base_url}/health", timeout=5)
resp.raise_for_status()
print("health:", resp.json())

resp = httpx.get(f"{base_url}/categories", timeout=5)
resp.raise_for_status()
print("categories:", len(resp.json()["data"]))

resp = httpx.get(f"{base_url}/books", params={"limit": 1}, timeout=5)
resp.raise_for_status()
print("books:", resp.json()["pagination"])
