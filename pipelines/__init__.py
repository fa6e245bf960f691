"""
Pipelines — Kubeflow Pipelines (KFP v2) components and pipeline definitions.

Each component is a Python function decorated with ``@kfp.dsl.component``
so it can run in its own container.
"""
