"""Async block helpers -- fetch data, then render the block with it.

A block helper may be a coroutine function: it awaits its data and then
awaits ``options['fn'](data)``. The block content can use further async
helpers; deferbars resolves them before handing the text back.

Run:
    python app.py
"""

import asyncio

from deferbars import wrap

# -- Simulated async data sources ----------------------------------------

READINGS = {
    "Darmstadt": {"temp": 15.99, "sky": "cloudy"},
    "Lisbon": {"temp": 22.5, "sky": "clear"},
}


async def fetch_weather(city: str) -> dict:
    """Simulate a weather API call."""
    await asyncio.sleep(0.01)
    return {"city": city, **READINGS.get(city, {"temp": 0, "sky": "unknown"})}


async def weather(this, options, city):
    """Block helper: render the block with the fetched reading."""
    data = await fetch_weather(city)
    return await options["fn"](data)


async def forecast(this, city):
    """Inline helper used inside the weather block."""
    await asyncio.sleep(0.02)
    return "rain" if city == "Darmstadt" else "sun"


# -- Template setup -------------------------------------------------------

TEMPLATE_SOURCE = """\
<ul>
{{#each cities}}
  <li>{{#weather name}}{{city}}: {{temp}}°C, {{sky}} (tomorrow: {{forecast city}}){{/weather}}</li>
{{/each}}
</ul>
"""

env = wrap()
env.register_helper({"weather": weather, "forecast": forecast})

headline = env.compile("{{#weather city}}{{city}}: {{temp}}°C{{/weather}}")
template = env.compile(TEMPLATE_SOURCE)

# Run at import time for test access
headline_output = asyncio.run(headline({"city": "Darmstadt"}))
output = asyncio.run(template({"cities": [{"name": "Darmstadt"}, {"name": "Lisbon"}]}))


def main() -> None:
    print(headline_output)
    print(output)


if __name__ == "__main__":
    main()
