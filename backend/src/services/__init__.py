"""Meeting-spot pipeline services."""
