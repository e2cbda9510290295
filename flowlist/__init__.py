"""FlowList server — productivity backend with a tool-calling assistant."""
