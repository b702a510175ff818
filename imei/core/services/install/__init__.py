"""
Install service — onion layers of the build pipeline.

    data           → components, recipes, constants (pure data)
    domain         → version comparison, build decisions (pure)
    detection      → read-only host probes
    resolver       → target version resolution
    execution      → subprocess, HTTP, archives, signatures (writes)
    orchestration  → stages, pipeline, top-level install flow

Import from the layer modules directly; this package deliberately
re-exports nothing so that ``data`` can be imported by the models
without pulling in the whole stack.
"""
