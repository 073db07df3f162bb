"""SimBay simulator booking and membership API."""
