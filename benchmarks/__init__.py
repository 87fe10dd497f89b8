"""
Cross-backend comparisons that run outside the default test session.

``pytest benchmarks`` feeds the generated fixtures through every parser in
``jzbench.available_parsers()``. Speed goes through pytest-benchmark, grouped
per fixture. Memory goes through the same MemoryProfiler that ``jzbench run``
uses. Nothing here writes result tables or history snapshots; use
``jzbench run --snapshot-root`` for numbers that should be kept.
"""
