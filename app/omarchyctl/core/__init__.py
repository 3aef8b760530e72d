"""Core infrastructure: paths, settings, theme, history and the step runner."""
