"""
Provisioning service — onion layers, leaf to root.

    data           → built-in catalog (pure data)
    detection      → read-only probes (never write)
    execution      → installers, each returning a Receipt
    orchestration  → pipelines assembled from execution steps

Import from the layer modules directly; this package re-exports
nothing so that the models layer can read the catalog without
pulling in the whole service.
"""
