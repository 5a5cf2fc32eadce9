"""Node-graph automation: executor, run use case and node handlers."""

from automation.application.use_cases.graphs.executor import GraphExecutor
from automation.application.use_cases.graphs.run_graph import GraphRunService

__all__ = ["GraphExecutor", "GraphRunService"]
