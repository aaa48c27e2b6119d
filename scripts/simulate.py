"""
Ordering Session Simulation Script

Runs concurrent customer sessions (browse cities and menu, fill a cart,
place an order) through EmojisushiApi.
By default the sessions hit the in-memory MockBackend; pass --base-url
to run against a real deployment.

Run from project root: python scripts/simulate.py

Author: Khalil Bannouri
Version: 1.0.0
"""

import asyncio
import sys
import os
import random
import time
import argparse
import uuid
from datetime import datetime
from typing import Any, Optional

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from emojisushi import EmojisushiApi, EmojisushiError
from emojisushi.core.config import setup_logging
from emojisushi.services.backend import SESSION_HEADER, MockBackend

# Configuration
MOCK_BASE_URL = "https://mock.emojisushi/api/"
TOTAL_SESSIONS = 20

# Sample data for random customers
FIRST_NAMES = ["Olena", "Taras", "Iryna", "Andrii", "Sofiia", "Maksym", "Kateryna", "Dmytro"]
LAST_NAMES = ["Shevchenko", "Kovalenko", "Bondarenko", "Tkachenko", "Kravchenko", "Melnyk"]
STREETS = ["Derybasivska", "Pushkinska", "Frantsuzkyi bulvar", "Kanatna", "Hretska"]


def generate_random_customer() -> dict[str, Any]:
    """Generate random customer info."""
    return {
        "firstname": random.choice(FIRST_NAMES),
        "lastname": random.choice(LAST_NAMES),
        "phone": f"+38050{random.randint(1000000, 9999999)}",
        "address": f"{random.choice(STREETS)}, {random.randint(1, 120)}",
    }


# =============================================================================
# SESSION
# =============================================================================

async def run_session(api: EmojisushiApi, session_num: int) -> dict[str, Any]:
    """Browse the menu, fill the cart and place one order."""
    customer = generate_random_customer()
    start_time = time.time()

    try:
        cities = await api.get_cities(include_spots=True)
        spots = [spot for city in cities.data for spot in city.spots]
        products = await api.get_products(category_slug=api.menu_category_slug)
        payments = await api.get_payment_methods()
        shipping = await api.get_shipping_methods()

        for product in random.sample(products.data, k=min(3, len(products.data))):
            variant = random.choice(product.variants) if product.variants else None
            await api.add_cart_product(
                product_id=product.id,
                quantity=random.randint(1, 3),
                variant_id=variant.id if variant else None,
            )

        cart = await api.get_cart()
        method = random.choice(shipping.data)

        response = await api.place_order(
            phone=customer["phone"],
            firstname=customer["firstname"],
            lastname=customer["lastname"],
            shipping_method_id=method.id,
            payment_method_id=random.choice(payments.data).id,
            spot_id=random.choice(spots).id,
            address=customer["address"] if method.code == "courier" else None,
            sticks=random.randint(0, 4),
        )
        elapsed = round(time.time() - start_time, 3)

        return {
            "session_num": session_num,
            "success": response.success,
            "order_id": response.order_id,
            "total": float(cart.total or 0),
            "time": elapsed,
            "error": None if response.success else response.message,
        }
    except EmojisushiError as e:
        elapsed = round(time.time() - start_time, 3)
        return {
            "session_num": session_num,
            "success": False,
            "error": str(e)[:100],
            "time": elapsed,
        }


async def run_client_session(
    session_num: int,
    base_url: str,
    lang: str,
    backend: Optional[MockBackend],
) -> dict[str, Any]:
    """Open one client per session, identified by its own session header."""
    transport = backend.transport() if backend else None
    async with EmojisushiApi(base_url, lang, transport=transport) as api:
        api.set_header(SESSION_HEADER, uuid.uuid4().hex)
        return await run_session(api, session_num)


# =============================================================================
# MAIN SIMULATION RUNNER
# =============================================================================

async def run_simulation(
    num_sessions: int = TOTAL_SESSIONS,
    base_url: Optional[str] = None,
    lang: str = "uk",
    failure_rate: float = 0.0,
) -> dict[str, Any]:
    """
    Run concurrent ordering sessions.

    Args:
        num_sessions: Number of customer sessions
        base_url: Real API URL (None = in-memory MockBackend)
        lang: Locale sent with every request
        failure_rate: Simulated 503 rate of the MockBackend
    """
    backend = None if base_url else MockBackend(
        failure_rate=failure_rate,
        min_latency=0.05,
        max_latency=0.2,
    )
    target = base_url or MOCK_BASE_URL

    print("=" * 70)
    print("🍣 ORDERING SESSION SIMULATION")
    print("=" * 70)
    print(f"📋 Sessions: {num_sessions}")
    print(f"🎯 Target: {target}{' (mock)' if backend else ''}")
    print(f"🌐 Lang: {lang}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    start_time = time.time()
    results = await asyncio.gather(*[
        run_client_session(i + 1, target, lang, backend) for i in range(num_sessions)
    ])
    total_time = round(time.time() - start_time, 2)

    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]

    print("\n" + "=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)

    print(f"\n✅ Successful Orders: {len(successful)}/{num_sessions}")
    print(f"❌ Failed Sessions: {len(failed)}/{num_sessions}")
    print(f"⏱️  Total Time: {total_time}s")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        total_revenue = sum(r["total"] for r in successful)

        print(f"\n📈 Performance Metrics:")
        print(f"   Average Session: {avg_time}s")
        print(f"   Fastest: {min(r['time'] for r in successful)}s")
        print(f"   Slowest: {max(r['time'] for r in successful)}s")
        print(f"   💰 Total Revenue: {total_revenue:.2f} UAH")

    if failed:
        print(f"\n⚠️  Failed Session Details (showing first 5):")
        for f in failed[:5]:
            print(f"   Session #{f['session_num']}: {f.get('error', 'Unknown error')}")

    if backend:
        print(f"\n📨 Requests served by mock: {len(backend.requests)}")
        print(f"🧾 Orders recorded by mock: {len(backend.orders)}")

    print("=" * 70)

    return {
        "total": num_sessions,
        "successful": len(successful),
        "failed": len(failed),
        "total_time": total_time,
        "results": results,
    }


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Ordering Session Simulation Script")
    parser.add_argument("--sessions", type=int, default=TOTAL_SESSIONS, help="Number of sessions")
    parser.add_argument("--base-url", default=None, help="Real API base URL (default: mock backend)")
    parser.add_argument("--lang", default="uk", help="Locale code")
    parser.add_argument("--failure-rate", type=float, default=0.0, help="Mock 503 rate (0.0-1.0)")
    args = parser.parse_args()

    setup_logging()

    summary = asyncio.run(run_simulation(
        num_sessions=args.sessions,
        base_url=args.base_url,
        lang=args.lang,
        failure_rate=args.failure_rate,
    ))
    sys.exit(0 if summary["failed"] == 0 else 1)
