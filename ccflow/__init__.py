"""ccflow: scaffold and upgrade AI-assisted development workflows.

Creates ``.claude`` trees of agent, command and hook templates from packaged
blueprints, writes the ``workflow.yaml`` marker, and keeps a manifest of
managed files so later upgrades never clobber hand-edited templates.
"""

__version__ = "0.3.0"
__description__ = "Workflow scaffolding and non-destructive template upgrades"

__all__ = ["__version__"]
