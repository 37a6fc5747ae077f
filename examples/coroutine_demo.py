"""
Generator Coroutine Demo

Demonstrates driving generator functions over asynk futures, both from
plain synchronous code and from inside an asyncio program.
"""

import asyncio

from asynk import Future, Rejection, Reactor, coroutine, drive, when_all


USERS = [
    {"name": "David", "experience": 13, "colleagues": [2, 4]},
    {"name": "Ted", "experience": 3, "colleagues": [3]},
    {"name": "Jenn", "experience": 8, "colleagues": [0, 4]},
    {"name": "Miguel", "experience": 19, "colleagues": [1]},
    {"name": "Igor", "experience": 9, "colleagues": [0, 2]},
]


def get_user_by_id(user_id: int, delay: float = 0.01) -> Future:
    """Simulated lookup that settles on a later event loop iteration."""
    future: Future = Future()
    loop = asyncio.get_running_loop()
    if 0 <= user_id < len(USERS):
        loop.call_later(delay, future.resolve, USERS[user_id])
    else:
        loop.call_later(delay, future.reject, "No user with that ID!")
    return future


# Example 1: Driving a generator synchronously
def example_sync_drive():
    """Ready futures, drained by the reactor."""
    print("\n=== Example 1: Synchronous Drive ===")

    def add():
        a = yield Future.make_ready(4)
        b = yield Future.make_ready(5)
        return a + b

    result = drive(add)
    print(f"Pending callbacks: {Reactor.pending()}")
    print(f"Result: {result.get()}")


# Example 2: Coroutines composed recursively
@coroutine
def countdown(n: int):
    if n == 0:
        return []
    rest = yield countdown(n - 1)
    return [n] + rest


def example_recursion():
    """A coroutine waiting on itself."""
    print("\n=== Example 2: Recursive Composition ===")
    print(f"Countdown: {countdown(5).get()}")


# Example 3: Fan-out inside a coroutine
@coroutine
def team_experience(user_id: int):
    user = yield get_user_by_id(user_id)
    colleagues = yield when_all([get_user_by_id(i) for i in user["colleagues"]])
    return user["experience"] + sum(c["experience"] for c in colleagues)


async def example_fan_out():
    """when_all from inside a driven computation."""
    print("\n=== Example 3: Fan-out ===")
    print(f"Team experience of user 0: {await team_experience(0)}")


# Example 4: Error handling
@coroutine
def safe_lookup(user_id: int):
    try:
        user = yield get_user_by_id(user_id)
    except Rejection as err:
        return f"lookup failed: {err.reason}"
    return user["name"]


async def example_error_handling():
    """Rejections raised at the yield, caught or propagated."""
    print("\n=== Example 4: Error Handling ===")
    print(f"Known id: {await safe_lookup(1)}")
    print(f"Unknown id: {await safe_lookup(8)}")

    try:
        await team_experience(8)
    except Rejection as err:
        print(f"Propagated: {err.reason}")


async def main():
    """Run the asyncio examples."""
    await example_fan_out()
    await example_error_handling()


if __name__ == "__main__":
    print("╔══════════════════════════════════════════╗")
    print("║      asynk Generator Coroutine Demo      ║")
    print("╚══════════════════════════════════════════╝")

    example_sync_drive()
    example_recursion()
    asyncio.run(main())

    print("\n✅ All examples completed!")
