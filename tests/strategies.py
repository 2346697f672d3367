"""Shared hypothesis strategies for deferbars property-based testing."""

from __future__ import annotations

from hypothesis import strategies as st

from deferbars import DEFAULT_PLACEHOLDER_CHAR

# Text that cannot contain the placeholder marker
marker_free_text = st.text(
    alphabet=st.characters(
        blacklist_categories=("Cs",),
        blacklist_characters=DEFAULT_PLACEHOLDER_CHAR,
    ),
    max_size=50,
)

# Plain words safe to use as helper arguments in templates
word = st.from_regex(r"[a-zA-Z0-9]{1,12}", fullmatch=True)

# Number of event-loop ticks a helper waits before resolving
ticks = st.integers(min_value=0, max_value=6)

ledger_index = st.integers(min_value=0, max_value=10**9)
