"""Hello World -- the simplest deferbars example.

Register a helper that returns a coroutine, compile a template and await
it. The template itself is ordinary Handlebars.

Run:
    python app.py
"""

import asyncio

from deferbars import wrap

env = wrap()


async def lookup(this, key):
    """Simulate an async lookup (database, cache, HTTP...)."""
    await asyncio.sleep(0.01)
    return {"a": "abc", "b": "xyz"}.get(key, key)


env.register_helper("helper", lookup)

template = env.compile("123{{helper a}}456{{helper b}}")

# Run at import time for test access
output = asyncio.run(template({"a": "a", "b": "b"}))


def main() -> None:
    print(output)
    print()

    # Same template, different context
    for key in ["kida", "pybars", "python"]:
        print(asyncio.run(template.render(a=key, b=key)))


if __name__ == "__main__":
    main()
