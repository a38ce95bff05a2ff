"""
Dining Service Simulation Script

Seats guests at many tables concurrently and walks every order through
COOKING -> MEAL -> COMPLETION against a running API.
Run from project root: python scripts/simulate.py

Version: 1.0.0
"""

import argparse
import asyncio
import random
import time
from datetime import datetime
from typing import Any

import httpx

# Configuration
API_BASE_URL = "http://localhost:8080"
TOTAL_TABLES = 20

PRODUCTS = [
    {"name": "Fried chicken", "price": "16000"},
    {"name": "Spicy chicken", "price": "17000"},
    {"name": "Garlic chicken", "price": "18000"},
    {"name": "Cola", "price": "2000"},
]


# =============================================================================
# CATALOG SETUP
# =============================================================================

async def setup_catalog(client: httpx.AsyncClient) -> list[dict[str, Any]]:
    """Create one menu group and a single-product menu per product."""
    response = await client.post(f"{API_BASE_URL}/api/menu-groups", json={"name": "Simulation"})
    response.raise_for_status()
    menu_group_id = response.json()["id"]

    menus = []
    for product in PRODUCTS:
        response = await client.post(f"{API_BASE_URL}/api/products", json=product)
        response.raise_for_status()
        product_id = response.json()["id"]

        response = await client.post(
            f"{API_BASE_URL}/api/menus",
            json={
                "name": product["name"],
                "price": product["price"],
                "menu_group_id": menu_group_id,
                "menu_products": [{"product_id": product_id, "quantity": 1}],
            },
        )
        response.raise_for_status()
        menus.append(response.json())
    return menus


# =============================================================================
# DINING SESSION
# =============================================================================

async def dine(
    client: httpx.AsyncClient,
    session_num: int,
    menus: list[dict[str, Any]],
) -> dict[str, Any]:
    """Seat a party, order, eat, pay and clear the table."""
    start_time = time.time()

    try:
        response = await client.post(
            f"{API_BASE_URL}/api/tables", json={"number_of_guests": 0, "empty": True}
        )
        response.raise_for_status()
        table_id = response.json()["id"]

        response = await client.put(f"{API_BASE_URL}/api/tables/{table_id}/empty", json={"empty": False})
        response.raise_for_status()
        response = await client.put(
            f"{API_BASE_URL}/api/tables/{table_id}/number-of-guests",
            json={"number_of_guests": random.randint(1, 6)},
        )
        response.raise_for_status()

        line_items = [
            {"menu_id": menu["id"], "quantity": random.randint(1, 3)}
            for menu in random.sample(menus, random.randint(1, len(menus)))
        ]
        response = await client.post(
            f"{API_BASE_URL}/api/orders",
            json={"order_table_id": table_id, "order_line_items": line_items},
        )
        response.raise_for_status()
        order = response.json()

        for next_status in ("MEAL", "COMPLETION"):
            response = await client.put(
                f"{API_BASE_URL}/api/orders/{order['id']}/order-status",
                json={"order_status": next_status},
            )
            response.raise_for_status()

        response = await client.put(f"{API_BASE_URL}/api/tables/{table_id}/empty", json={"empty": True})
        response.raise_for_status()

        total = sum(float(item["price"]) * item["quantity"] for item in order["order_line_items"])
        return {
            "session_num": session_num,
            "success": True,
            "order_id": order["id"],
            "total": total,
            "time": round(time.time() - start_time, 3),
        }
    except httpx.HTTPError as e:
        return {
            "session_num": session_num,
            "success": False,
            "error": str(e)[:100],
            "time": round(time.time() - start_time, 3),
        }


async def run_simulation(num_tables: int = TOTAL_TABLES) -> dict[str, Any]:
    """
    Run concurrent dining sessions.

    Args:
        num_tables: Number of tables served in parallel
    """
    print("=" * 70)
    print("DINING SERVICE SIMULATION")
    print("=" * 70)
    print(f"Tables: {num_tables}")
    print(f"Target: {API_BASE_URL}")
    print(f"Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    start_time = time.time()

    async with httpx.AsyncClient(timeout=30.0) as client:
        menus = await setup_catalog(client)
        results = await asyncio.gather(*[dine(client, i + 1, menus) for i in range(num_tables)])

    total_time = round(time.time() - start_time, 2)
    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]

    print("\n" + "=" * 70)
    print("SIMULATION RESULTS")
    print("=" * 70)
    print(f"\nCompleted sessions: {len(successful)}/{num_tables}")
    print(f"Failed sessions: {len(failed)}/{num_tables}")
    print(f"Total Time: {total_time}s")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        print(f"\nAverage session: {avg_time}s")
        print(f"Total Revenue: {sum(r['total'] for r in successful):.2f}")

    if failed:
        print("\nFailed sessions (showing first 5):")
        for f in failed[:5]:
            print(f"   Session #{f['session_num']}: {f['error']}")

    print("\nNext: check the Celery worker, then run python scripts/verify.py")
    print("=" * 70)

    return {
        "total": num_tables,
        "successful": len(successful),
        "failed": len(failed),
        "total_time": total_time,
    }


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Dining Service Simulation")
    parser.add_argument("--tables", type=int, default=TOTAL_TABLES, help="Number of tables")
    parser.add_argument("--url", default=API_BASE_URL, help="API base URL")
    args = parser.parse_args()

    API_BASE_URL = args.url
    asyncio.run(run_simulation(args.tables))
