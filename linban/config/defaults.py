"""Default configuration values and constants for linban."""

import pathlib

API_URL = "https://api.linear.app/graphql"

# Seconds before a remote call is abandoned
REQUEST_TIMEOUT = 30

# Issues fetched per board refresh
ISSUE_LIMIT = 100

LOG_LEVELS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "SUCCESS": "blue",
}

PRIORITY_NAMES = {
    1: "Urgent",
    2: "High",
    3: "Medium",
    4: "Low",
    0: "No Priority",
}

PRIORITY_COLORS = {
    1: "red",
    2: "yellow",
    3: "green",
    4: "blue",
    0: "gray",
}

# Relationship graph geometry, in terminal cells
GRAPH_CENTER_X = 40
GRAPH_CENTER_Y = 16
GRAPH_RADIUS = 15
# Terminal cells are about twice as tall as wide; the circle is widened
# by this factor so side neighbours clear the focal box
GRAPH_CELL_ASPECT = 2
GRAPH_NODE_WIDTH = 20
GRAPH_NODE_HEIGHT = 3

# Columns never get narrower than this, even with many groups
MIN_COLUMN_WIDTH = 24

CONFIG_FILE = pathlib.Path.home() / ".config" / "linban" / "config.yaml"
