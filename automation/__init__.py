"""Record automation engine: trigger matching, action dispatch, and node-graph execution."""
