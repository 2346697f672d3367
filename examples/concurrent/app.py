"""Concurrent rendering -- many overlapping renders on one event loop.

Every render owns its own ledger of pending values (held in a ContextVar),
so eight renders of the same template with different context and
different helper latencies never see each other's results.

Run:
    python app.py
"""

import asyncio
import random

from deferbars import wrap

env = wrap()


async def author(this, page_id):
    """Simulate a lookup whose latency varies per page."""
    await asyncio.sleep(random.uniform(0, 0.02))
    return f"author-{page_id}"


async def tags(this, page_id):
    await asyncio.sleep(random.uniform(0, 0.02))
    return [f"tag-{page_id}-a", f"tag-{page_id}-b"]


env.register_helper({"author": author, "tags": tags})

TEMPLATE_SOURCE = """\
<article id="page-{{page_id}}">
  <h1>{{title}}</h1>
  <p>by {{author page_id}}</p>
  <ul>{{#each (tags page_id)}}<li>{{this}}</li>{{/each}}</ul>
</article>"""

template = env.compile(TEMPLATE_SOURCE, name="article")

pages = [{"page_id": i, "title": f"Page {i}"} for i in range(8)]


async def render_all() -> list[str]:
    return await asyncio.gather(*(template(page) for page in pages))


# Run at import time for test access
results = asyncio.run(render_all())
output = "\n".join(results)


def main() -> None:
    print(f"Rendered {len(results)} pages concurrently:\n")
    for i, html in enumerate(results):
        print(f"--- Render {i} ---")
        print(html)
        print()


if __name__ == "__main__":
    main()
