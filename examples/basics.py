import asyncio
from dataclasses import dataclass

from anyflux import Store, get_or_init

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Defining a store")
print("-" * 100)
print()


# A store is any class with a new() classmethod and a should_notify() method. Subclassing Store
# gives you both: new() calls the class with no arguments, should_notify() compares with !=.
@dataclass(frozen=True)
class Counter(Store):
    count: int = 0


counter = get_or_init(Counter)
print(f"Initial state: {counter.state}")

# Reductions return whether subscribers should hear about the change.
print(f"Increment notifies: {counter.reduce(lambda s: Counter(s.count + 1))}")
print(f"Identity notifies: {counter.reduce(lambda s: s)}")

# Every lookup on this thread shares the same instance.
print(f"Same store: {get_or_init(Counter).state}")

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Stores that depend on other stores")
print("-" * 100)
print()


@dataclass(frozen=True)
class Settings(Store):
    user: str = "alice"


@dataclass(frozen=True)
class Session(Store):
    user: str = ""
    visits: int = 0

    # Constructors may request other stores.
    @classmethod
    def new(cls):
        return cls(user=get_or_init(Settings).state.user)

    # Visits are bookkeeping; only a different user is worth a notification.
    def should_notify(self, other):
        return self.user != other.user


session = get_or_init(Session)
print(f"Session user: {session.state.user}")
print(f"Visit notifies: {session.reduce(lambda s: Session(s.user, s.visits + 1))}")
print(f"User change notifies: {session.set(Session('bob', 0))}")

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Asynchronous reductions")
print("-" * 100)
print()


async def fetch_count(state):
    await asyncio.sleep(0.01)
    return Counter(state.count + 100)


print(f"Future reduction notifies: {asyncio.run(counter.reduce_future(fetch_count))}")
print(f"Final count: {counter.state.count}")
