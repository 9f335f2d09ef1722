"""Seed example users into the database configured by DATABASE_URL.

Expects a table:
    CREATE TABLE users (id SERIAL PRIMARY KEY, name TEXT, email TEXT)
"""
from dataclasses import dataclass
from typing import Optional

from tablerepo import Filter, RecordDescriptor, RecordRepository


@dataclass
class User:
    id: Optional[int] = None
    name: Optional[str] = None
    email: Optional[str] = None


INITIAL_USERS = [
    {"name": "Ann", "email": "ann@example.com"},
    {"name": "Bob", "email": "bob@example.com"},
    {"name": "Cy", "email": "cy@example.com"},
]


def main():
    users_repo = RecordRepository(RecordDescriptor.for_dataclass(User, "users"))

    for user in INITIAL_USERS:
        existing = users_repo.select_by_condition(Filter.where(f"email = {users_repo.placeholder}", user["email"]))
        if existing:
            print(f"Skipping {user['email']} - already exists (id={existing[0].id})")
            continue

        users_repo.insert(User(**user))
        print(f"Created: {user['name']} <{user['email']}>")


if __name__ == "__main__":
    main()
