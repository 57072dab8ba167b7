"""Terminal front end for the Flip 7 engine."""
