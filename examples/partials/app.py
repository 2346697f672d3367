"""Partials -- reusable fragments that call async helpers.

A partial is rendered as part of the template that includes it, so its
async helpers are resolved together with the caller's. Partials can be
registered from source, from a compiled template, or per render call.

Run:
    python app.py
"""

import asyncio

from deferbars import wrap

USERS = {1: "Ada", 2: "Grace", 3: "Barbara"}


async def username(this, user_id):
    """Simulate a user service."""
    await asyncio.sleep(0.01)
    return USERS.get(user_id, "unknown")


async def avatar(this, user_id):
    await asyncio.sleep(0.005)
    return f"/avatars/{user_id}.png"


env = wrap()
env.register_helper({"username": username, "avatar": avatar})

env.register_partial("user", '<img src="{{avatar id}}"> {{username id}}')
env.register_partial("row", env.compile("<li>{{> user}} ({{role}})</li>"))

template = env.compile("<ul>{{#each members}}{{> row}}{{/each}}</ul>{{> footer}}")

members = [
    {"id": 1, "role": "admin"},
    {"id": 2, "role": "editor"},
    {"id": 3, "role": "<guest>"},
]

# Run at import time for test access
output = asyncio.run(
    template(
        {"members": members, "count": len(members)},
        partials={"footer": "<p>{{count}} members</p>"},
    )
)


def main() -> None:
    print(output)


if __name__ == "__main__":
    main()
