"""Graph algorithms: capacity/weight policy, topological order, max flow, SPF."""
