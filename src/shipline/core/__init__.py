"""Core Module

This package contains the core functionality for shipline: the pipeline
engine, the release adapter and the collaborators it drives.

Submodules:
    - pipeline: Step model, planner, resolvers and run orchestrator
    - release: Release adapter and step executor
    - components: Component records and the component store
    - modules: Module manifests, registry and action dispatcher
    - build: Component build collaborator
    - version: Version read and bump collaborator
    - git: Tag, push and change-summary collaborators
    - process: Subprocess helper shared by the collaborators
    - config: TOML configuration cascade
    - errors: Exception hierarchy
    - logger: Logging configuration

Import from specific submodules as needed:
    from shipline.core.release import plan_release
    from shipline.core.config import get_config
"""
