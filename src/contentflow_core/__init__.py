"""Content workflow core.

Connectors for the source host (GitHub), document workspace (Notion),
calendar (Google Calendar) and web research, plus the workflow orchestrator
that composes them into multi-step content operations.

Modules:
- config: environment-driven settings
- errors: error taxonomy
- schemas: tool input models and vendor records
- workflow: step outcomes and workflow results
- connectors: validated vendor connectors
- orchestrator: composite workflow operations
- services: connector and orchestrator construction
"""

__version__ = "1.0.0"
