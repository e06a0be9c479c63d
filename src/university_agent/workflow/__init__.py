"""Workflow domain: registry, interpretation, tracking and execution.

- `definitions`: the static workflow registry
- `interpreter`: natural-language command to workflow id + params
- `tracker`: in-memory execution tracking with step proofs
- `handlers` / `executor`: the hard-coded workflow implementations
"""

__all__: list[str] = []
