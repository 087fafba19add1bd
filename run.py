"""A dev entrypoint that issues a few IDs and checks they keep growing."""

import os
import sys

from snowfactory import create_generator

generator = create_generator(os.getenv("ENV", "development"))

if __name__ == "__main__":
    count = int(sys.argv[1]) if len(sys.argv) > 1 else 10
    last_id = -1
    for _ in range(count):
        now_id = generator.next_id()
        print(now_id, generator.decode(now_id))
        if now_id <= last_id:
            sys.exit(f"ID {now_id} is not greater than {last_id}")
        last_id = now_id
