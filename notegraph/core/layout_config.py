# notegraph/core/layout_config.py
# Force-directed layout defaults.
LAYOUT_SPREAD = 500.0
LAYOUT_ITERATIONS = 100
REPULSION_STRENGTH = 5000.0
REPULSION_CUTOFF = 500.0
ATTRACTION_STRENGTH = 0.01
MIN_EDGE_DISTANCE = 50.0
DAMPING = 0.8
COINCIDENT_JITTER = 0.5

# Rendered node circles.
BASE_NODE_RADIUS = 20.0
CONNECTION_RADIUS_MULTIPLIER = 0.2
MAX_RADIUS_MULTIPLIER = 3.0
MIN_NODE_RADIUS = 5.0
MAX_NODE_RADIUS = 100.0

# Gesture validation.
MAX_COORDINATE = 1_000_000.0
DETERMINANT_EPSILON = 1e-10
MAX_SEARCH_QUERY_LENGTH = 1000

# Neighbourhood sizes used by the interaction model.
SELECTION_DEGREES = 1
LOCAL_GRAPH_DEGREES = 2
